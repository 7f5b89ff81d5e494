# domain/errors.py

class MatchingError(Exception):
    """Base exception for the intent matching core"""
    pass

class InvalidInputError(MatchingError):
    """Message is empty, blank or not text"""
    pass

class UpstreamUnavailableError(MatchingError):
    """Text-generation service could not be reached or refused the request"""
    pass

class MalformedUpstreamResponseError(MatchingError):
    """Text-generation service answered with content that fails the schema"""
    pass

class PersistenceFailureError(MatchingError):
    """Agent store query failed or returned an unusable record"""
    pass
