"""
depmirror — mirror Glide dependencies into a private GitLab group.
"""

__version__ = "0.1.0"
