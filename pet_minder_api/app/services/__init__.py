"""
Service layer abstraction.

Each service encapsulates business logic for a domain and is the only
place that talks to the database.  Services look a record up first,
then ask ``AccessGuard`` whether the caller may touch it, and only
then read or write.
"""
