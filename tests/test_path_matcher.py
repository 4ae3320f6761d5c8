"""
Tests for glob matching of request paths against rule patterns.
"""
import pytest

from security.path_matcher import match_path


@pytest.mark.unit
class TestMatchPath:

    @pytest.mark.parametrize("pattern,path", [
        ("/api/staffs/schedules", "/api/staffs/schedules"),
        ("/api/staffs/*/schedules", "/api/staffs/1/schedules"),
        ("/api/staffs/{staffId}/schedules", "/api/staffs/42/schedules"),
        ("/api/staffs/{staffId:\\d+}/schedules", "/api/staffs/42/schedules"),
        ("/api/staffs/{staffId:\\d{3}}/schedules", "/api/staffs/123/schedules"),
        ("/api/users/**", "/api/users"),
        ("/api/users/**", "/api/users/1/orders/7"),
        ("/**/orders", "/api/users/1/orders"),
        ("/staffs/{staffId}/logs/**", "/staffs/1/logs/9"),
        ("/files/*.json", "/files/report.json"),
        ("/files/?.txt", "/files/a.txt"),
        ("/api/users/", "/api/users"),
    ])
    def test_matches(self, pattern, path):
        assert match_path(pattern, path)

    @pytest.mark.parametrize("pattern,path", [
        ("/api/staffs/*/schedules", "/api/staffs/1/2/schedules"),
        ("/api/staffs/{staffId:\\d+}/schedules", "/api/staffs/abc/schedules"),
        ("/api/staffs/{staffId:\\d{3}}/schedules", "/api/staffs/12/schedules"),
        ("/api/users/*", "/api/users"),
        ("/api/Users/**", "/api/users/1"),
        ("/files/?.txt", "/files/ab.txt"),
        ("/api/users/**", "/api/orders/1"),
        ("/api/staffs/{staffId}/schedules", "/api/staffs/1/schedules/extra"),
    ])
    def test_does_not_match(self, pattern, path):
        assert not match_path(pattern, path)

    @pytest.mark.parametrize("pattern,path", [
        (None, "/a"),
        ("", "/a"),
        ("/a", None),
        ("/a", ""),
        ("a", "/a"),
        ("/a", "a"),
    ])
    def test_empty_or_unanchored(self, pattern, path):
        assert not match_path(pattern, path)

    def test_literal_regex_characters_are_escaped(self):
        assert match_path("/api/v1.0/items", "/api/v1.0/items")
        assert not match_path("/api/v1.0/items", "/api/v1x0/items")
