"""
Poor Jokes service: joke submission, duplicate detection and moderation for the
Poor Jokes new-tab browser extension.
"""
