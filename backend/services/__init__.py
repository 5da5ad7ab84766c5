"""
Invoice consolidation services
Listing, downloading, merging and delivery
"""
