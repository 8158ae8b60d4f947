"""
Cross-cutting building blocks: settings, logging, database access,
authentication, typed service errors, and the ownership and reminder
schedule rules shared by every service.
"""
