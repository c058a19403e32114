"""
Core state holders for topicnews.
"""
