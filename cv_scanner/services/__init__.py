"""
Service layer: keyword cache, persistence stores and the CV scanning pipeline.
"""
