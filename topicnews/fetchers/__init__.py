"""
Remote article fetchers for topicnews.
"""
