"""
Manifest handling — glide.yaml / glide.lock models, IO and rewriting.
"""
