import argparse
import asyncio
import logging

from ratscrew.matcher import ALL_RULES, describe_rule, parse_rules
from ratscrew.models import MatchConfig
from .server import HostServer


def main() -> None:
    parser = argparse.ArgumentParser(description="Ratscrew slap-card match host")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None, help="Fixed shuffle seed (repeatable deals)")
    parser.add_argument(
        "--rules",
        default=",".join(describe_rule(rule) for rule in ALL_RULES),
        help="Comma separated slap rules to enable",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        rules = parse_rules(args.rules.split(","))
    except ValueError as exc:
        parser.error(str(exc))

    config = MatchConfig(seed=args.seed, slap_rules=rules)
    server = HostServer(config)
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()
