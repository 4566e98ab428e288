"""
Login Module

Establishes the authenticated session every later request is made with:
the login form's anti-forgery token is read from the login page and posted
back together with the credentials.
"""

import logging
from typing import Optional

import requests
from bs4 import BeautifulSoup

from .errors import AuthenticationError


DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (compatible; cbt-scraper/1.0)',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'ja,en-US;q=0.7,en;q=0.3',
}

TOKEN_FIELD = 'authenticity_token'
REDIRECT_STATUSES = (302, 303)


def create_session() -> requests.Session:
    """Create a cookie-carrying HTTP session with the scraper's headers."""
    session = requests.Session()
    session.headers.update(DEFAULT_HEADERS)
    return session


class Authenticator:
    """
    Logs into the site and hands back the session holding its cookies.

    The login succeeds only when the form POST is answered with a redirect;
    redirects are not followed so that status can be observed.
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = 30.0):
        """
        Args:
            session: Session to authenticate; a new one is created if omitted
            timeout: Per-request timeout in seconds
        """
        self.session = session if session is not None else create_session()
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def authenticate(self, login_url: str, email: str, password: str) -> requests.Session:
        """
        Log in with the given credentials.

        Args:
            login_url: URL of the sign-in form (GET) and its target (POST)
            email: Account e-mail address
            password: Account password

        Returns:
            The authenticated session

        Raises:
            AuthenticationError: On network errors, a missing token, or a
                non-redirect answer to the login POST
        """
        self.logger.info(f"Logging in at: {login_url}")
        try:
            token = self._fetch_token(login_url)

            form = {
                TOKEN_FIELD: token,
                'user[email]': email,
                'user[password]': password,
            }
            response = self.session.post(
                login_url,
                data=form,
                headers={'Content-Type': 'application/x-www-form-urlencoded'},
                allow_redirects=False,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise AuthenticationError(f"Login request failed: {e}") from e

        if response.status_code not in REDIRECT_STATUSES:
            raise AuthenticationError(f"Login failed: status code {response.status_code}")

        self.logger.info(f"Login succeeded, redirected to: {response.headers.get('Location')}")
        return self.session

    def _fetch_token(self, login_url: str) -> str:
        """Download the login page and read the hidden anti-forgery token."""
        response = self.session.get(login_url, timeout=self.timeout)
        if not response.ok:
            raise AuthenticationError(f"Cannot open login page: status code {response.status_code}")

        soup = BeautifulSoup(response.text, 'lxml')
        field = soup.select_one(f'input[name="{TOKEN_FIELD}"]')
        token = field.get('value') if field else None
        if not token:
            raise AuthenticationError("Anti-forgery token not found on login page")

        self.logger.debug("Anti-forgery token found")
        return token

    def close(self):
        """Close the HTTP session."""
        self.session.close()
