from __future__ import annotations

APPCENTER_TIMEOUT_SECONDS = 120.0

# --wait: poll the release file listing until every uploaded file shows up.
UPLOAD_WAIT_ATTEMPTS = 30
UPLOAD_WAIT_DELAY_SECONDS = 2.0
