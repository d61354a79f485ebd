"""Unit tests for the python -m secure_headers entry point."""

import pytest

from secure_headers import __main__ as cli


class TestHeadersCommand:
    """Tests for the headers sub-command."""

    @pytest.mark.unit
    def test_prints_all_headers(self, capsys):
        cli.main(["headers"])
        out = capsys.readouterr().out
        assert "Strict-Transport-Security: max-age=31536000; includeSubDomains" in out
        assert "'strict-dynamic'" in out
        assert "Critical-CH: Sec-CH-UA, Sec-CH-UA-Mobile, Sec-CH-UA-Platform" in out

    @pytest.mark.unit
    def test_basic_level(self, capsys):
        cli.main(["headers", "--level", "basic"])
        out = capsys.readouterr().out
        assert "Permissions-Policy: camera=('self'), microphone=('self'), geolocation=('self')" in out

    @pytest.mark.unit
    def test_invalid_level_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main(["headers", "--level", "medium"])
        assert exc.value.code == 1
        assert "Invalid security level: medium" in capsys.readouterr().err

    @pytest.mark.unit
    def test_invalid_env_exits(self, monkeypatch, capsys):
        monkeypatch.setenv("SECURE_HEADERS_FRAME_OPTIONS", "ALLOWALL")
        with pytest.raises(SystemExit) as exc:
            cli.main(["headers"])
        assert exc.value.code == 1
        assert "Invalid X-Frame-Options value: ALLOWALL" in capsys.readouterr().err


class TestScanCommand:
    """Tests for the scan sub-command."""

    @pytest.mark.unit
    def test_prints_detected_csp(self, sample_html_path, capsys):
        cli.main(["scan", sample_html_path])
        out = capsys.readouterr().out
        assert out.startswith("Content-Security-Policy: default-src 'self'; script-src 'self' https://code.jquery.com")
        assert "frame-src 'self' https://www.youtube.com" in out
        assert "img-src 'self' data: https://placekitten.com:8443" in out
        assert "<script nonce=" not in out
        assert "style-src 'self' https://cdn.jsdelivr.net https://fonts.googleapis.com;" in out

    @pytest.mark.unit
    def test_inject_prints_markup(self, sample_html_path, capsys):
        cli.main(["scan", sample_html_path, "--inject"])
        out = capsys.readouterr().out
        nonce = out.split("'nonce-")[1].split("'")[0]
        assert f'<script nonce="{nonce}">' in out
        assert f'<style nonce="{nonce}">' in out
        assert f"style-src 'self' https://cdn.jsdelivr.net https://fonts.googleapis.com 'nonce-{nonce}'" in out


class TestServeCommand:
    """Tests for the default serve command."""

    @pytest.mark.unit
    def test_defaults_to_serve(self, monkeypatch):
        served = []
        monkeypatch.setattr(cli, "_serve", lambda config: served.append(config))
        cli.main([])
        assert len(served) == 1
        assert served[0].port == 8000
