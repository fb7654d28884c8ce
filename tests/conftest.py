"""
Pytest configuration and fixtures for tagextract tests.
"""

import logging

import pytest

from records import (
    PUBLISHED,
    ArticleSearchRequest,
    ArticleSearchRequestNotOmitEmpty,
    ArticleSearchRequestOptional,
)


@pytest.fixture
def populated_request() -> ArticleSearchRequest:
    """Article request with every field set to a non-zero value."""
    return ArticleSearchRequest(
        article_number=1,
        title="t",
        author_id="a",
        published_date_from=PUBLISHED,
        published_date_to=PUBLISHED,
    )


@pytest.fixture
def zero_request() -> ArticleSearchRequest:
    return ArticleSearchRequest()


@pytest.fixture
def zero_request_not_omitempty() -> ArticleSearchRequestNotOmitEmpty:
    return ArticleSearchRequestNotOmitEmpty()


@pytest.fixture
def populated_optional_request() -> ArticleSearchRequestOptional:
    return ArticleSearchRequestOptional(
        article_number=1,
        title="t",
        author_id="a",
        published_date_from=PUBLISHED,
        published_date_to=PUBLISHED,
    )


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers installed by setup_logging() between tests."""
    yield
    logger = logging.getLogger("tagextract")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
