"""
Zenith Planner core: records, calendar utilities, derivations and the document store
"""
