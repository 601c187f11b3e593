"""JSON-RPC client for the Bravia local control API.

Each call is a single HTTP POST carrying the pre-shared key header. There
are no retries here; callers decide what to do on failure.
"""

import json
import logging

import requests

from core.errors import ProtocolError, TransportError

logger = logging.getLogger('bravia.rpc')

SYSTEM_ENDPOINT = '/sony/system/'
AV_CONTENT_ENDPOINT = '/sony/avContent/'

DEFAULT_TIMEOUT = 10


class RpcClient:
    """Authenticated JSON-RPC calls to one TV."""

    def __init__(self, host: str, port: int = 80, psk: str = '',
                 session: requests.Session | None = None, timeout: float = DEFAULT_TIMEOUT):
        """Initialise RpcClient.

        Args:
            host: TV IP address or hostname
            port: HTTP port (usually 80)
            psk: Pre-shared key configured on the TV
            session: Optional requests session (a new one is created if omitted)
            timeout: Socket timeout in seconds for each request
        """
        self.host = host
        self.port = port
        self.psk = psk
        self.timeout = timeout
        self.base_url = f"http://{host}:{port}"
        self.session = session or requests.Session()

    def call(self, endpoint: str, method: str, version: str = '1.0',
             params: list | None = None, request_id: int = 1) -> list:
        """Make a JSON-RPC call.

        Args:
            endpoint: Path such as '/sony/system/'
            method: JSON-RPC method name
            version: Method version
            params: Method parameters (defaults to an empty list)
            request_id: JSON-RPC request id

        Returns:
            The 'result' array of the response

        Raises:
            TransportError: Connection refused, reset or timed out
            ProtocolError: HTTP status >= 400, non-JSON body or missing result
        """
        payload = {
            'id': request_id,
            'method': method,
            'version': version,
            'params': params if params is not None else [],
        }
        body = json.dumps(payload).encode('utf-8')
        headers = {
            'Content-Type': 'application/json',
            'Content-Length': str(len(body)),
            'X-Auth-PSK': self.psk,
        }
        url = f"{self.base_url}{endpoint}"

        try:
            response = self.session.post(url, data=body, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method} to {self.host} failed: {e}") from e

        if response.status_code >= 400:
            raise ProtocolError(
                f"HTTP {response.status_code} for {endpoint}: {response.text[:200]}")

        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError(f"Non-JSON response for {method} from {self.host}") from e

        if not isinstance(data, dict):
            raise ProtocolError(f"Unexpected response for {method}: {str(data)[:200]}")

        if data.get('error'):
            raise ProtocolError(f"{method} returned error: {data['error']}")

        result = data.get('result')
        if not isinstance(result, list):
            raise ProtocolError(f"{method} response has no result array")

        return result

    def get_power_status(self) -> str:
        """Get the TV power status string ('active', 'standby', ...)."""
        result = self.call(SYSTEM_ENDPOINT, 'getPowerStatus', request_id=2)
        first = result[0] if result else None
        if isinstance(first, dict) and first.get('status'):
            return str(first['status'])
        return 'unknown'

    def set_power_status(self, on: bool) -> None:
        self.call(SYSTEM_ENDPOINT, 'setPowerStatus', params=[{'status': bool(on)}], request_id=2)

    def get_content_list(self, source: str) -> list:
        """List tunable content for a source such as 'tv:dvbt'."""
        result = self.call(AV_CONTENT_ENDPOINT, 'getContentList',
                           params=[{'source': source, 'stIdx': 0}], request_id=13)
        first = result[0] if result else None
        return first if isinstance(first, list) else []

    def set_play_content(self, uri: str) -> None:
        self.call(AV_CONTENT_ENDPOINT, 'setPlayContent', params=[{'uri': uri}], request_id=101)
