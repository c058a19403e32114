"""
Output formatters for topicnews.
"""
