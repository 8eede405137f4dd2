"""Shared pytest fixtures and configuration."""

import gzip
import os
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from bulk_whois.utilities.retry import stream_request_with_retry as original_stream_request

SAMPLE_DUMP = """\
% This is a test RPSL database dump.
% The objects are in RPSL format.

person:         John Doe
address:        Main Street 1
phone:          +1 555 0100
remarks:        first person
nic-hdl:        JD1-TEST
source:         TEST

role:           Network Operations
address:        Main Street 2
nic-hdl:        NOC1-TEST
remarks:        role remark
source:         TEST

person:         Jane Roe
address:        Side Street 3
address:        Building B
address:        Floor 4
nic-hdl:        JR2-TEST
source:         TEST

route:          192.0.2.0/24
origin:         AS64500
mnt-by:         MAINT-TEST
source:         TEST

"""


@pytest.fixture(autouse=True)
def fast_retries():
    """Disable retry wait times in all tests for speed."""

    async def fast_request(client, url, destination, headers=None, max_attempts=3, min_wait=1, max_wait=10, **kwargs):
        # Always use min_wait=0 in tests to skip delays
        return await original_stream_request(
            client,
            url,
            destination,
            headers=headers,
            max_attempts=max_attempts,
            min_wait=0,
            max_wait=0,
            **kwargs,
        )

    with patch("bulk_whois.utilities.download.stream_request_with_retry", fast_request):
        yield


def write_dump(path: Path, text: str, gzipped: bool = True) -> Path:
    """Write a dump file, gzip-compressed by default."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if gzipped:
        with gzip.open(path, "wt", encoding="utf-8") as f:
            f.write(text)
    else:
        path.write_text(text, encoding="utf-8")
    return path


def age_file(path: Path, days: float) -> None:
    """Set the modification time of path to `days` days ago."""
    mtime = time.time() - days * 86400
    os.utime(path, (mtime, mtime))


@pytest.fixture
def sample_dump(tmp_path):
    """A gzipped dump with two person, one role and one route object."""
    return write_dump(tmp_path / "dump.db.gz", SAMPLE_DUMP)


@pytest.fixture
def sample_text():
    return SAMPLE_DUMP


@pytest.fixture
def make_dump():
    return write_dump


@pytest.fixture
def set_age():
    return age_file
