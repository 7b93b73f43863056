##########################################################################################
#
# Script name: errors.py
#
# Description: Exception types raised by provider adapters and configuration loading.
#
##########################################################################################


# ****************************************************************************************
# Exceptions
# ****************************************************************************************


class AggregatorError(Exception):
    '''
    Base class for exceptions in this package.
    '''
    pass


class ProviderError(AggregatorError):
    '''
    A news provider request failed or returned an error status.
    '''
    def __init__(self, provider: str, detail: str):
        self.provider = provider
        self.detail = detail
        self.message = f'{provider} API: {detail}'
        super().__init__(self.message)


class ConfigError(AggregatorError, ValueError):
    '''
    Provider configuration could not be loaded or has the wrong shape.
    '''
    pass
