from __future__ import annotations

import ipaddress
import re
import socket
import urllib.parse
from pathlib import Path

import requests
from bs4 import BeautifulSoup

from ..store import ContentStore, sanitize_filename
from .docs import decode_text, extract_pdf_text


USER_AGENT = "wordcounter/1.0"
HEADERS = {"User-Agent": USER_AGENT}
BLOCKED_HOSTS = {"localhost", "localhost.localdomain", "ip6-localhost", "metadata.google.internal"}
BLOCKED_HOST_SUFFIXES = (".local", ".internal", ".home", ".lan")


def download_to_store(
    url: str,
    store: ContentStore,
    timeout: float = 30,
    max_bytes: int = 40 * 1024 * 1024,
    allow_private_hosts: bool = False,
) -> tuple[Path, str]:
    """Stream ``url`` into ``store``; returns the stored path and the Content-Type."""
    assert_safe_remote_url(url, allow_private_hosts=allow_private_hosts)

    with requests.get(url, stream=True, timeout=timeout, headers=HEADERS) as response:
        response.raise_for_status()
        name = _filename_from_response(url, response.headers.get("Content-Disposition"))
        path = store.save_stream(response.iter_content(chunk_size=65536), name_hint=name, max_bytes=max_bytes)
        return path, response.headers.get("Content-Type", "")


def text_from_response_bytes(url: str, data: bytes, content_type: str = "") -> tuple[str, str]:
    content_type = content_type.lower()

    if "application/pdf" in content_type or urllib.parse.urlparse(url).path.lower().endswith(".pdf"):
        return extract_pdf_text(data), "pdf"

    text = decode_text(data)
    if "text/html" in content_type or _looks_like_html(text):
        return _extract_html_text(text), "html"

    return text, "text"


def _extract_html_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")

    for bad in soup(["script", "style", "noscript", "svg", "canvas"]):
        bad.decompose()

    root = soup.body or soup
    text = root.get_text("\n", strip=True)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _looks_like_html(text: str) -> bool:
    prefix = text[:500].lower()
    return "<html" in prefix or "<!doctype html" in prefix


def _filename_from_response(url: str, content_disposition: str | None) -> str:
    if content_disposition:
        m = re.search(r"filename\*?=(?:UTF-8''|\")?([^\";]+)", content_disposition, flags=re.IGNORECASE)
        if m:
            candidate = urllib.parse.unquote(m.group(1)).strip().strip('"')
            if candidate:
                return sanitize_filename(candidate)

    parsed = urllib.parse.urlparse(url)
    return sanitize_filename(Path(parsed.path).name or "download.txt")


def assert_safe_remote_url(url: str, allow_private_hosts: bool = False) -> None:
    parsed = urllib.parse.urlparse(url.strip())
    scheme = (parsed.scheme or "").lower()
    if scheme not in {"http", "https"}:
        raise ValueError("Only http/https URLs are allowed")

    host = (parsed.hostname or "").strip().lower().strip(".")
    if not host:
        raise ValueError("URL host is missing")
    if allow_private_hosts:
        return
    if host in BLOCKED_HOSTS or host.endswith(BLOCKED_HOST_SUFFIXES):
        raise ValueError(f"Blocked private host target: {host}")
    if _looks_like_ip(host) and _ip_is_non_public(host):
        raise ValueError(f"Blocked non-public IP target: {host}")

    port = parsed.port or (443 if scheme == "https" else 80)
    try:
        resolved = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except OSError:
        # Unresolvable hosts fail later in the request itself.
        return

    for item in resolved:
        sockaddr = item[4]
        if not sockaddr:
            continue
        ip = str(sockaddr[0]).split("%", 1)[0]
        if _ip_is_non_public(ip):
            raise ValueError(f"Blocked non-public resolved address for {host}: {ip}")


def _looks_like_ip(host: str) -> bool:
    try:
        ipaddress.ip_address(host.split("%", 1)[0])
        return True
    except ValueError:
        return False


def _ip_is_non_public(value: str) -> bool:
    ip = ipaddress.ip_address(value.split("%", 1)[0])
    return not ip.is_global
