"""Shared fixtures for table source tests."""

import pytest


@pytest.fixture
def published_csv():
    return (
        b'\xef\xbb\xbfUser Name,Alice,Bob\r\n'
        b'Ranked List,"1. Song A\n2. Song B","1. Song B - Artist"\r\n'
    )


@pytest.fixture
def published_html():
    """A sheet published to the web: row-number gutter, column letters,
    line breaks inside cells, and padding rows at the bottom."""
    return b"""<html><body><div id="sheets-viewport"><table class="waffle">
<thead><tr><th class="row-header"></th><th>A</th><th>B</th><th>C</th></tr></thead>
<tbody>
<tr><th class="row-headers-background">1</th><td>User Name</td><td>Alice</td><td>Bob</td></tr>
<tr><th>2</th><td>Ranked List</td><td>1. Song A<br>2. Song B</td><td>1. Song B</td></tr>
<tr><th>3</th><td></td><td></td><td></td></tr>
</tbody></table></div></body></html>"""
