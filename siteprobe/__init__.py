"""
siteprobe - website diagnostics engine.

Traces redirect chains, validates page links, audits security headers and
robots.txt, and resolves WHOIS/RDAP registration data for a domain.
"""

__version__ = "0.1.0"
