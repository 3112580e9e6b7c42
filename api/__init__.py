"""
HTTP surface of the rockfall relay.
"""
