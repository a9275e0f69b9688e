# examples/try-me-script.py
"""
Try Me First! - Fetch items from Directo XMLCore

Usage:
    python try-me-script.py <config.json> <secrets.json> [item_class]

Example:
    python try-me-script.py directo-config.json directo-secrets.json GOODS

The config file holds a "directo" section (see directo-config-schema.json),
the secrets file a single {"token": "..."} entry.

What it does:
    1. Loads and validates configuration
    2. Lists items (optionally filtered by class)
    3. Prints code and name of each item
"""

import argparse
import sys

from directo import ConfigLoader, DirectoClient, configure_logging
from directo.exceptions import ApiError, DirectoError, HelpfulError

logger = configure_logging()


def main() -> int:
    parser = argparse.ArgumentParser(description="List Directo items")
    parser.add_argument("config", help="Path of the JSON config file")
    parser.add_argument("secrets", help="Path of the JSON secrets file")
    parser.add_argument("item_class", nargs="?", default=None, help="Item class filter")
    args = parser.parse_args()

    try:
        config = ConfigLoader(args.config, args.secrets).load_config()
        filters = {'class': args.item_class} if args.item_class else {}

        with DirectoClient(config) as client:
            items = client.items().list(filters)

        for item in items:
            print(f"{item.get('@code') or item.get('code')}\t{item.get('name')}")
        logger.info(f"✅ Retrieved {len(items)} item(s)")
        return 0

    except HelpfulError as e:
        logger.error(str(e))
        return 1
    except ApiError as e:
        logger.error(f"❌ {e.message}")
        for line in e.formatted_errors():
            logger.error(f"  {line}")
        return 1
    except DirectoError as e:
        logger.error(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Script interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
