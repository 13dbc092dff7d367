"""HTTP transport: one GET per logical call, parsed into an envelope."""

import requests

from gamejolt.api.signer import SignedRequest
from gamejolt.core.config import ClientConfig
from gamejolt.core.exceptions import TransportError
from gamejolt.core.models import Envelope
from gamejolt.log import LogSink


class Transport:
    """Executes signed requests against the Game Jolt API.

    Calls block until the response arrives.  There is no retry; a
    ``timeout`` is only applied when the configuration sets one.

    Args:
        config: The client configuration.
        session: An optional pre-built :class:`requests.Session`.  Tests
            inject a stub here.
        log: Diagnostic sink.
    """

    def __init__(
        self,
        config: ClientConfig,
        session: requests.Session | None = None,
        log: LogSink | None = None,
    ):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": config.user_agent,
            "Accept": "application/json",
        })
        self._log = log or LogSink(__name__, verbose=config.verbose)

    def fetch(self, request: SignedRequest | None) -> Envelope | None:
        """Issue *request* and return its envelope.

        Args:
            request: The signed request, or ``None`` when construction was
                refused upstream.

        Returns:
            The parsed :class:`~gamejolt.core.models.Envelope`, or ``None``
            without touching the network when *request* is ``None``.

        Raises:
            TransportError: On network errors, non-2xx statuses, or a body
                that is not a JSON object with a ``response`` field.
        """
        if request is None:
            return None

        try:
            r = self.session.get(request.url, timeout=self.config.timeout)
            r.raise_for_status()
            body = r.json()
        except requests.RequestException as e:
            self._log.warning(
                "transport_failed", endpoint=request.endpoint, error=str(e)
            )
            raise TransportError(str(e)) from e
        except ValueError as e:
            self._log.warning(
                "transport_failed",
                endpoint=request.endpoint,
                error="response body is not JSON",
            )
            raise TransportError("response body is not JSON") from e

        envelope = Envelope.from_body(body)
        if envelope is None:
            self._log.warning(
                "transport_failed",
                endpoint=request.endpoint,
                error="missing response envelope",
            )
            raise TransportError("missing response envelope")
        return envelope
