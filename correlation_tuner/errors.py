"""Exceptions raised by Correlation Tuner."""


class InvalidConfiguration(ValueError):
    """Raised when detector construction parameters cannot produce a usable setup.

    This is a startup-time failure: a candidate table, pitch detector or
    settings object was asked for with non-positive or otherwise unusable
    values. It is never raised while analysing audio.
    """
