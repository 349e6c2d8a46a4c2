"""
Movie catalog: an in-memory movie record set with query and mutation operations.
"""
