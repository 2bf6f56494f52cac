"""Global test fixtures."""

import logfire

# Route handlers and the httpx client are instrumented; keep spans local
logfire.configure(send_to_logfire=False, console=False)
