#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Custom exceptions for sysdig_provider
"""


class SysdigBaseException(Exception):
    """
    Top class for the provider exceptions
    """

    def __init__(self, msg, *args):
        super().__init__(msg, *args)


class DecodeError(SysdigBaseException, ValueError):
    """
    Malformed JSON found at a deserialization boundary
    """


class ConfigurationError(SysdigBaseException):
    """
    Configuration is structurally valid but misses required settings
    """


class PatchFailed(SysdigBaseException):
    """
    The task definition patcher returned an error or faulted
    """


class PatchCancelled(PatchFailed):
    """
    The caller cancelled the patch before it completed
    """


class TransportError(SysdigBaseException):
    """
    Connection or timeout failure talking to the Sysdig API
    """


class SysdigApiError(SysdigBaseException):
    """
    Non-successful response from the Sysdig API, message built from the response body

    :ivar int status_code:
    """

    def __init__(self, msg, status_code: int = None, *args):
        super().__init__(msg, *args)
        self.status_code = status_code


class NotFoundError(SysdigBaseException):
    """
    The remote entity does not exist (anymore)
    """


class GroupMappingNotFound(NotFoundError):
    """
    Group mapping not found
    """

    def __init__(self, msg="group mapping not found", *args):
        super().__init__(msg, *args)


class NotificationChannelNotFound(NotFoundError):
    """
    Notification channel not found
    """

    def __init__(self, msg="notification channel not found", *args):
        super().__init__(msg, *args)
