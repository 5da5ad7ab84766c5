"""Invoice consolidation HTTP layer"""
