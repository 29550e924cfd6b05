class CrimeStatsException(Exception):
    """Base Exception Class"""
    pass
class MissingDataError(CrimeStatsException, KeyError):
    """Error for when a (year, month) cell was never populated in the grid"""
    pass
class GridDataError(CrimeStatsException):
    """Error for rows that can't be merged into the grid"""
    pass
class DataFetchError(CrimeStatsException):
    """Error class for when theres an issue fetching rows from the remote data store"""
    pass
class ConfigError(CrimeStatsException):
    """Config Error"""
    pass
