"""Pagination service - follows Link header cursors page by page"""

import logging
from typing import List, Optional
from urllib.parse import urljoin

import requests

from fetchwise.domain.config.paginate import PaginateConfig
from fetchwise.domain.models.events import PageEvent, PageHandler
from fetchwise.infrastructure.cancellation import CancellationToken
from fetchwise.infrastructure.link_header import LinkHeader
from fetchwise.infrastructure.retry import RetryEngine, is_success

logger = logging.getLogger(__name__)


class PaginationError(ValueError):
    """A page returned a Link header that cannot be followed."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"[{url}] {reason}")


class PaginationEngine:
    """Fetches paginated resources, one request per page

    Pages are fetched strictly in order because the URL of each page comes from
    the previous response. Every page goes through the retry engine. Response
    bodies are never read, so GraphQL-style cursors are not supported.
    """

    def __init__(
        self,
        retry_engine: RetryEngine,
        config: PaginateConfig,
        on_page: Optional[PageHandler] = None,
    ):
        """Initialize pagination engine

        Args:
            retry_engine: Retry engine used for each page
            config: Pagination configuration (read-only)
            on_page: Optional callback receiving a PageEvent once the next
                page URL is known
        """
        self.retry_engine = retry_engine
        self.config = config
        self.on_page = on_page

    def _next_url(self, current_url: str, response: requests.Response) -> Optional[str]:
        link_header = LinkHeader.from_headers(response.headers)
        if self.config.next_page_resolver is not None:
            return self.config.next_page_resolver(current_url, link_header)
        next_links = link_header.get_by_rel("next")
        if not next_links:
            return None
        return urljoin(current_url, next_links[0].uri)

    def _prepare(
        self, session: requests.Session, template: requests.Request, url: str, page: int
    ) -> requests.PreparedRequest:
        request = requests.Request(
            method=template.method,
            url=url,
            headers=template.headers,
            files=template.files,
            data=template.data,
            json=template.json,
            # Next links carry their own query string
            params=template.params if page == 1 else None,
            auth=template.auth,
            cookies=template.cookies,
            hooks=template.hooks,
        )
        return session.prepare_request(request)

    def execute(
        self,
        request: requests.Request,
        token: CancellationToken,
        session: requests.Session,
    ) -> List[requests.Response]:
        """Fetch every page starting from ``request.url``

        Args:
            request: Request of the first page, used as template for the next ones
            token: Cancellation token shared by every page
            session: Session used to prepare each page request

        Returns:
            Responses in page order. The last one may be an error response.

        Raises:
            PaginationError: If a Link header is malformed and
                ``fail_on_bad_link_header`` is set
            OperationCancelled: If cancelled during a page or a pause
        """
        max_pages = self.config.max_pages
        responses: List[requests.Response] = []
        url: Optional[str] = request.url
        page = 1

        while url is not None and (max_pages is None or page <= max_pages):
            if page > 1 and self.config.pause > 0:
                token.sleep(self.config.pause)

            current_url = url
            url = None
            logger.debug(f"Fetching page {page}: {current_url}")
            prepared = self._prepare(session, request, current_url, page)
            response = self.retry_engine.execute(prepared, token)
            responses.append(response)

            if not is_success(response.status_code):
                logger.info(f"Page {page} returned HTTP {response.status_code}, stopping pagination")
                break

            try:
                url = self._next_url(current_url, response)
            except ValueError as e:
                if self.config.fail_on_bad_link_header:
                    raise PaginationError(current_url, str(e)) from e
                logger.warning(f"Invalid Link header on {current_url}, stopping pagination: {e}")
                break

            has_next_page = url is not None and (max_pages is None or page < max_pages)
            if has_next_page and self.on_page is not None:
                self.on_page(
                    PageEvent(
                        page=page,
                        max_pages=max_pages,
                        current_url=current_url,
                        next_url=url,
                    )
                )
            page += 1

        logger.info(f"Pagination finished after {len(responses)} page(s)")
        return responses
