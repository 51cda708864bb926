"""
Mirror Integration — Keep private copies of every locked dependency.

This package maps import paths to mirror names, talks to the GitLab API,
and pushes local Glide cache clones into the mirror group.
"""
