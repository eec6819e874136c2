"""Tests for ecosystem detection."""


from core.detect import identify
from core.models import RepositoryKind


class TestEcosystemDetection:
    """Test ecosystem detection from filenames and content."""

    def test_detect_npm_by_filename(self):
        """Should detect npm from package.json filename."""
        assert identify("", "package.json") is RepositoryKind.NPM
        assert identify("", "web/package.json") is RepositoryKind.NPM

    def test_detect_go_by_filename(self):
        """Should detect Go from go.mod filename."""
        assert identify("", "go.mod") is RepositoryKind.GO

    def test_detect_go_by_content(self, sample_go_mod):
        """Should detect Go from module and go directives."""
        assert identify(sample_go_mod) is RepositoryKind.GO

    def test_detect_npm_by_content(self):
        """Should detect npm from package.json dependency sections."""
        content = '''
        {
          "dependencies": {
            "express": "^4.18.0"
          }
        }
        '''
        assert identify(content) is RepositoryKind.NPM

        content_dev = '{"devDependencies": {"jest": "^29.0.0"}}'
        assert identify(content_dev) is RepositoryKind.NPM

        content_optional = '{"optionalDependencies": {"fsevents": "^2.3.0"}}'
        assert identify(content_optional) is RepositoryKind.NPM

    def test_detect_unknown_for_ambiguous(self):
        """Should return None for unclear content."""
        assert identify("", "requirements.txt") is None
        assert identify("some random text") is None
        assert identify("module example.com/app") is None
        assert identify("") is None

    def test_filename_takes_precedence(self):
        """Filename should take precedence over content when both present."""
        content = '{"dependencies": {"express": "^4.18.0"}}'
        assert identify(content, "go.mod") is RepositoryKind.GO
