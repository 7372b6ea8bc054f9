"""
URL validation for the few outbound requests Folio makes.

Font files are the only remote resources fetched, so every request goes
through ``SafeRequestor`` which refuses private, loopback and metadata
addresses and can pin requests to an allowlist of hosts.
"""

import ipaddress
import re
import socket
from urllib.parse import urljoin, urlparse
from typing import Iterable, List, Optional, Set, Tuple, Union

import requests

from . import __version__


class URLValidator:
    """Reject URLs that point at internal networks or use odd schemes."""

    ALLOWED_SCHEMES: Set[str] = {'http', 'https'}

    BLOCKED_IP_RANGES: List[str] = [
        '0.0.0.0/8',
        '10.0.0.0/8',
        '100.64.0.0/10',
        '127.0.0.0/8',
        '169.254.0.0/16',
        '172.16.0.0/12',
        '192.0.0.0/24',
        '192.168.0.0/16',
        '198.18.0.0/15',
        '224.0.0.0/4',
        '240.0.0.0/4',
        '::1/128',
        '::/128',
        '::ffff:0:0/96',
        'fe80::/10',
        'fc00::/7',
        'ff00::/8',
    ]

    BLOCKED_HOSTNAMES: Set[str] = {
        'localhost',
        'localhost.localdomain',
        'ip6-localhost',
        'ip6-loopback',
        'metadata.google.internal',
        '169.254.169.254',
    }

    SUSPICIOUS_PATTERNS = [
        r'%2f%2f',
        r'%5c%5c',
        r'\.\./',
        r'%2e%2e%2f',
        r'javascript:',
    ]

    def __init__(self, max_redirects: int = 5):
        """
        Args:
            max_redirects: Maximum number of redirects a font download may follow
        """
        self.max_redirects = max_redirects
        self._blocked_networks = [ipaddress.ip_network(cidr) for cidr in self.BLOCKED_IP_RANGES]

    def validate_url(self, url: str, allowed_domains: Optional[Iterable[str]] = None) -> Tuple[bool, str]:
        """
        Check a URL before it is requested.

        Args:
            url: The URL to validate
            allowed_domains: Optional hosts the URL must belong to

        Returns:
            Tuple of (is_valid, message)
        """
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            return False, "Invalid URL format"
        if parsed.scheme.lower() not in self.ALLOWED_SCHEMES:
            return False, f"Unsupported URL scheme: {parsed.scheme}"
        if '@' in parsed.netloc:
            return False, "Credentials in URL are not allowed"

        hostname = (parsed.hostname or '').lower()
        if not hostname:
            return False, "Invalid hostname in URL"
        if hostname in self.BLOCKED_HOSTNAMES:
            return False, f"Blocked hostname: {hostname}"

        if allowed_domains:
            if not any(hostname == d.lower() or hostname.endswith('.' + d.lower()) for d in allowed_domains):
                return False, f"Domain not in allowlist: {hostname}"

        url_lower = url.lower()
        for pattern in self.SUSPICIOUS_PATTERNS:
            if re.search(pattern, url_lower):
                return False, "URL contains suspicious patterns"

        try:
            for ip_str in self._resolve_hostname(hostname):
                if not self._is_ip_allowed(ip_str):
                    return False, f"Blocked IP address: {ip_str}"
        except socket.gaierror:
            return False, f"Cannot resolve hostname: {hostname}"

        return True, "URL is valid"

    def _resolve_hostname(self, hostname: str) -> List[str]:
        addr_info = socket.getaddrinfo(hostname, None, family=socket.AF_UNSPEC, type=socket.SOCK_STREAM)
        return list({info[4][0] for info in addr_info})

    def _is_ip_allowed(self, ip_str: str) -> bool:
        try:
            ip = ipaddress.ip_address(ip_str.split('%', 1)[0])
        except ValueError:
            return False
        return not any(ip in network for network in self._blocked_networks)


class SafeRequestor:
    """HTTP GET that validates the URL first and never follows redirects blindly."""

    USER_AGENT = f'Folio/{__version__} (site builder)'

    def __init__(self, validator: URLValidator = None, session: requests.Session = None,
                 font_hosts: Optional[Iterable[str]] = None):
        self.validator = validator or URLValidator()
        self.session = session
        self.font_hosts = set(font_hosts or ())

    def safe_get(self, url: str, allowed_domains: Optional[Iterable[str]] = None,
                 **kwargs) -> Tuple[bool, Union[requests.Response, str]]:
        """
        Make a GET request after URL validation.

        Returns:
            Tuple of (success, response_or_error_message)
        """
        is_valid, error_msg = self.validator.validate_url(url, allowed_domains)
        if not is_valid:
            return False, f"URL validation failed: {error_msg}"

        kwargs.setdefault('timeout', 30)
        kwargs.setdefault('allow_redirects', False)
        headers = kwargs.setdefault('headers', {})
        headers.setdefault('User-Agent', self.USER_AGENT)

        try:
            getter = self.session.get if self.session else requests.get
            response = getter(url, **kwargs)
            response.raise_for_status()
            return True, response
        except requests.exceptions.RequestException as e:
            return False, f"HTTP request failed: {e}"

    def safe_font_get(self, url: str, **kwargs) -> Tuple[bool, Union[requests.Response, str]]:
        """
        GET a font file, restricted to the configured font hosts.

        Redirects are followed one hop at a time and every target goes
        through the same validation as the first URL.
        """
        allowed_domains = self.font_hosts or None
        kwargs['allow_redirects'] = False
        max_redirects = self.validator.max_redirects
        for _ in range(max_redirects + 1):
            success, result = self.safe_get(url, allowed_domains, **kwargs)
            if not success or not result.is_redirect:
                return success, result
            url = urljoin(url, result.headers['Location'])
        return False, f"Too many redirects (max {max_redirects})"
