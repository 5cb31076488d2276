"""forum/ -- Questions, answers, and member profiles.

Every service operation authenticates through auth.guard.AccessGuard before it
touches content. Layer rule: forum/ imports from core/ and auth/, never from api/.
"""
