"""
SiteProbe CLI

Run any single probe from the command line without the API server.
"""

import argparse
import asyncio
import json
import sys
import logging
from typing import Any, List

from siteprobe.core.config import get_settings
from siteprobe.probes.http_client import build_client
from siteprobe.probes.schemas import SecurityAudit
from siteprobe.probes.suite import ProbeSuite
from siteprobe.probes.url_utils import InvalidTargetError, normalize_domain, normalize_url


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

COMMANDS = {
    'redirects': 'Trace redirect chains',
    'links': 'Scan a page for broken links',
    'website': 'Scan a website for broken links (larger link budget)',
    'security': 'Audit security headers',
    'robots': 'Check robots.txt',
    'whois': 'WHOIS lookup with RDAP fallback',
}


def setup_argparse() -> argparse.ArgumentParser:
    """Set up command-line argument parser."""
    parser = argparse.ArgumentParser(
        description="SiteProbe - website health checks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Redirect chains for several sites
  python -m siteprobe.cli redirects example.com http://github.com

  # Broken links on a page, saved as JSON
  python -m siteprobe.cli links https://example.com -o links.json

  # Whole-site broken link scan
  python -m siteprobe.cli website https://example.com

  # WHOIS for every domain in a file
  python -m siteprobe.cli whois -f domains.txt -v
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    for name, help_text in COMMANDS.items():
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            'targets',
            nargs='*',
            help='URLs or domains to probe'
        )
        sub.add_argument(
            '-f', '--file',
            type=str,
            help='Read targets from a file, one per line (# comments allowed)'
        )
        sub.add_argument(
            '-o', '--output',
            type=str,
            help='Write results as JSON to this file'
        )
        sub.add_argument(
            '-v', '--verbose',
            action='store_true',
            help='Debug logging'
        )

    return parser


def load_targets_from_file(filepath: str) -> List[str]:
    """Load targets from a file."""
    try:
        with open(filepath, 'r') as f:
            return [line.strip() for line in f if line.strip() and not line.startswith('#')]
    except OSError as e:
        logger.error(f"Cannot read targets from {filepath}: {e}")
        sys.exit(1)


def print_result(command: str, result: Any) -> None:
    """Human-readable rendering of one probe result."""
    if command == 'redirects':
        print(f"\n{result.requested_url}")
        for i, hop in enumerate(result.hops, 1):
            if hop.error:
                print(f"  {i}. {hop.url} -> ERROR {hop.error}")
            else:
                print(f"  {i}. {hop.status} {hop.url}")
        print(f"  Final: {result.final_url} ({result.redirect_count} redirect(s))")
    elif command in ('links', 'website'):
        print(f"\n{result.url}")
        if result.error:
            print(f"  Error: {result.error}")
            return
        print(f"  Links found: {result.total_links} | Checked: {result.checked_links}")
        print(f"  Working: {len(result.working_links)} | Broken: {len(result.broken_links)}")
        for link in result.broken_links:
            reason = link.error or f"status {link.status}"
            print(f"    ✗ {link.url} ({reason})")
    elif command == 'security':
        print(f"\n{result.url}")
        for finding in result.headers:
            mark = '✓' if finding.present else '✗'
            detail = finding.error or finding.value or 'Not Set'
            print(f"  {mark} {finding.header_name}: {detail}")
    elif command == 'robots':
        print(f"\n{result.url}")
        print(f"  Valid: {result.is_valid} (status {result.status})")
        for issue in result.issues:
            print(f"  - {issue}")
    elif command == 'whois':
        print()
        print(result.raw_text)


async def run_command(args: argparse.Namespace) -> None:
    """Execute a probe command against every target."""
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    targets = load_targets_from_file(args.file) if args.file else args.targets
    if not targets:
        logger.error("Nothing to probe: pass targets or -f FILE")
        sys.exit(1)

    settings = get_settings()
    config = settings.probe_config()

    normalize = normalize_domain if args.command == 'whois' else normalize_url
    valid: List[str] = []
    for raw in targets:
        try:
            valid.append(normalize(raw))
        except InvalidTargetError as e:
            logger.error(f"Skipping {raw!r}: {e}")
    if not valid:
        sys.exit(1)

    logger.info(f"Running {args.command} against {len(valid)} target(s)")

    async with build_client(config) as client:
        probes = ProbeSuite.build(client, config)

        if args.command == 'redirects':
            results = await probes.tracer.trace_many(valid)
        elif args.command == 'links':
            results = [await probes.link_scanner.scan_page(url) for url in valid]
        elif args.command == 'website':
            results = [await probes.link_scanner.scan_website(url) for url in valid]
        elif args.command == 'security':
            results = [
                SecurityAudit(url=url, headers=await probes.security.audit(url))
                for url in valid
            ]
        elif args.command == 'robots':
            results = [await probes.robots.check(url) for url in valid]
        else:
            results = [await probes.whois.lookup(domain) for domain in valid]

    print("\n" + "="*80)
    print(f"{args.command.upper()} RESULTS")
    print("="*80)
    for result in results:
        print_result(args.command, result)

    if args.output:
        try:
            output_data = [r.model_dump(mode='json', exclude_none=True) for r in results]
            with open(args.output, 'w') as f:
                json.dump(output_data, f, indent=2)
            print(f"\nSaved {len(output_data)} result(s) to {args.output}")
        except OSError as e:
            logger.error(f"Could not write {args.output}: {e}")

    print("\n" + "="*80 + "\n")


def main():
    """Main entry point."""
    parser = setup_argparse()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(run_command(args))


if __name__ == '__main__':
    main()
