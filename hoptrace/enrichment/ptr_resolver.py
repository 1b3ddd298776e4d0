"""
PTR (reverse DNS) resolver
"""

import logging
from typing import Optional

import dns.exception
import dns.resolver
import dns.reversename


logger = logging.getLogger(__name__)


class PTRResolver:
    """
    PTR record resolver.

    Performs reverse DNS lookups to get hostnames for hop addresses.
    Answers, misses included, are cached for the rest of the run.
    """

    def __init__(self, timeout: float = 2.0):
        self.timeout = timeout
        self._resolver: Optional[dns.resolver.Resolver] = None
        try:
            self._resolver = dns.resolver.Resolver()
            self._resolver.timeout = timeout
            self._resolver.lifetime = timeout
        except dns.resolver.NoResolverConfiguration as e:
            logger.warning("reverse DNS disabled: %s", e)
        self._cache: dict[str, Optional[str]] = {}

    def _query(self, ip: str) -> Optional[str]:
        if self._resolver is None:
            return None
        try:
            answers = self._resolver.resolve(dns.reversename.from_address(ip), 'PTR')
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer,
                dns.resolver.NoNameservers, dns.exception.Timeout) as e:
            logger.debug("no PTR for %s: %s", ip, e)
            return None
        except dns.exception.DNSException as e:
            logger.debug("PTR lookup for %s failed: %s", ip, e)
            return None

        for rdata in answers:
            return str(rdata.target).rstrip('.')
        return None

    def resolve(self, ip: str) -> Optional[str]:
        """
        PTR lookup for a single IP.

        Args:
            ip: IP address to resolve

        Returns:
            Hostname without the trailing dot, or None if not found
        """
        if not ip:
            return None
        if ip not in self._cache:
            self._cache[ip] = self._query(ip)
        return self._cache[ip]

    def display_name(self, ip: str) -> str:
        """Hostname for display, falling back to the address itself"""
        return self.resolve(ip) or ip
