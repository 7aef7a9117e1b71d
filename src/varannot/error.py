class ConfigurationError(Exception):
    """
    raised when a store cannot be built from the files or parameters it was given

    for example if the score directory does not exist or the two partitions of an
    indexed annotation file declare different INFO fields
    """

    pass
