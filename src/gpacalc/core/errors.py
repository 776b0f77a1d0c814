class SelectionOutOfRange(IndexError):
    pass


class ConfigurationError(ValueError):
    pass
