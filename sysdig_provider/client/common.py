#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Client logic shared by the Sysdig Monitor and Sysdig Secure clients.
"""

from __future__ import annotations

import json
from typing import Union

import requests
import urllib3
from compose_x_common.compose_x_common import keyisset

from sysdig_provider.common.logging import LOG
from sysdig_provider.exceptions import DecodeError, SysdigApiError, TransportError

JSON_MIME = "application/json"
DEFAULT_TIMEOUT = 300.0


def error_message_from_body(body) -> Union[str, None]:
    """
    Builds the error message from the ``message`` and ``errors[].reason`` /
    ``errors[].message`` fields of an API error body, joined with ``, ``

    :return: the message, None if the body has none of these fields
    """
    if not isinstance(body, dict):
        return None
    parts = []
    if isinstance(body.get("message"), str):
        parts.append(body["message"])
    if isinstance(body.get("errors"), list):
        for error in body["errors"]:
            if not isinstance(error, dict):
                continue
            parts += [
                error[key]
                for key in ("reason", "message")
                if isinstance(error.get(key), str)
            ]
    if not parts:
        return None
    return ", ".join(parts)


def dump_request(request: requests.PreparedRequest) -> str:
    headers = {
        key: ("Bearer ***" if key.lower() == "authorization" else value)
        for key, value in request.headers.items()
    }
    body = request.body.decode() if isinstance(request.body, bytes) else request.body
    return f"{request.method} {request.url} {headers} {body or ''}"


class SysdigClient:
    """
    HTTP client for the Sysdig API, sets the bearer token and logs requests/responses
    at DEBUG level.

    :ivar str url: base URL of the API
    :ivar bool insecure: disables the TLS certificates verification
    :ivar dict extra_headers: headers added to every request
    """

    def __init__(
        self,
        token: str,
        url: str,
        insecure: bool = False,
        extra_headers: dict = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session = None,
    ):
        self.api_token = token
        self.url = url.rstrip("/")
        self.insecure = insecure
        self.extra_headers = dict(extra_headers) if extra_headers else {}
        self.timeout = timeout
        self.session = session if session else requests.Session()
        self.session.verify = not insecure
        if insecure:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.url})"

    def set_extra_headers(self, extra_headers: dict) -> None:
        self.extra_headers = dict(extra_headers) if extra_headers else {}

    def do_request(
        self, method: str, url: str, payload: Union[dict, str, None] = None
    ) -> requests.Response:
        """
        Performs the request against the API.

        :param str method: HTTP method
        :param str url: full URL
        :param payload: body, dicts are serialized to JSON
        :raises TransportError: connection failure or timeout
        """
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": JSON_MIME,
        }
        headers.update(self.extra_headers)
        if isinstance(payload, (dict, list)):
            payload = json.dumps(payload)
        request = requests.Request(method, url, headers=headers, data=payload)
        prepared = self.session.prepare_request(request)
        LOG.debug(f"[REQUEST] {dump_request(prepared)}")
        try:
            response = self.session.send(prepared, timeout=self.timeout)
        except requests.RequestException as error:
            LOG.error(f"{method} {url} failed: {error}")
            raise TransportError(f"{method} {url}: {error}") from error
        LOG.debug(
            f"[RESPONSE] {response.status_code} {response.reason} {response.text}"
        )
        return response

    @staticmethod
    def error_from_response(response: requests.Response) -> SysdigApiError:
        """
        Translates an unsuccessful response into a SysdigApiError, the message built from
        the JSON body when possible, the HTTP status otherwise.
        """
        status = f"{response.status_code} {response.reason or ''}".strip()
        try:
            body = response.json()
        except ValueError:
            return SysdigApiError(status, response.status_code)
        message = error_message_from_body(body)
        return SysdigApiError(message if message else status, response.status_code)

    @staticmethod
    def decode(response: requests.Response, key: str = None):
        """
        Decodes a JSON response body, optionally returning only one of its keys.

        :raises DecodeError: the body is not JSON, or the key is absent
        """
        try:
            body = response.json()
        except ValueError as error:
            raise DecodeError(
                f"invalid JSON in response from {response.url}: {error}"
            ) from error
        if key is None:
            return body
        if not isinstance(body, dict) or not keyisset(key, body):
            raise DecodeError(f"response from {response.url} has no {key}")
        return body[key]
