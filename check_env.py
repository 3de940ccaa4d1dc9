#!/usr/bin/env python3
"""Check the .env file and report which storage and geocoder settings the API will use."""

from pathlib import Path

ENV_TEMPLATE = """# Supabase Configuration (optional - requests and users stay in memory without it)
# Get these from: https://supabase.com/dashboard -> Your Project -> Settings -> API
VOITHEIA_SUPABASE_URL=https://your-project-id.supabase.co
VOITHEIA_SUPABASE_KEY=your-service-role-key-here

# API Configuration
VOITHEIA_API_PREFIX=/api
# VOITHEIA_FRONTEND_ALLOWED_ORIGINS accepts a JSON array or a comma-separated list

# Proximity search defaults
VOITHEIA_DEFAULT_REQUEST_AMOUNT=10
VOITHEIA_DEFAULT_REQUEST_PERIMETER_M=2000

# Geocoding (Nominatim-compatible)
VOITHEIA_GEOCODER_BASE_URL=https://nominatim.openstreetmap.org
VOITHEIA_GEOCODER_USER_AGENT=voitheia-backend/0.1 (you@example.org)
"""


def _mask(value: str, keep: int = 12) -> str:
    return value if len(value) <= keep else f"{value[:keep]}..."


def main() -> None:
    env_file = Path(__file__).parent / ".env"
    print("=" * 60)
    print("Voitheia environment checker")
    print("=" * 60)

    if not env_file.exists():
        env_file.write_text(ENV_TEMPLATE, encoding="utf-8")
        print(f"Created template .env at {env_file}; edit it and run again.")
        return

    print(f"Found .env at {env_file}")
    try:
        from voitheia.config import Settings
    except ImportError as e:
        print(f"Cannot import voitheia ({e}); run `pip install -e .` first.")
        return

    settings = Settings(_env_file=env_file)
    if settings.supabase_configured:
        print(f"Storage: Supabase at {_mask(settings.supabase_url, 30)} (key {_mask(settings.supabase_key)})")
        print(f"  tables: {settings.requests_table}, {settings.users_table}")
    else:
        print("Storage: in-memory (set VOITHEIA_SUPABASE_URL and VOITHEIA_SUPABASE_KEY to persist data)")
    print(f"Geocoder: {settings.geocoder_base_url} as '{settings.geocoder_user_agent}'")
    print(
        f"Proximity defaults: {settings.default_request_amount} requests "
        f"within {settings.default_request_perimeter_m} m"
    )
    print(f"CORS origins: {', '.join(settings.frontend_allowed_origins) or '(none)'}")


if __name__ == "__main__":
    main()
