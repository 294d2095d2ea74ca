from tests.mocks.client_mock import (
    ScriptedClient,
    bad_encoding_transport,
    failing_transport,
    unreachable,
)

__all__ = [
    'ScriptedClient',
    'bad_encoding_transport',
    'failing_transport',
    'unreachable',
]
