"""Tests for media platform resolvers."""

import pytest

from app.models.media import MediaKind, Platform, SpotifyKind
from app.resolvers.base import encode_uri_component, segment_after
from app.resolvers.exceptions import UnresolvableMediaUrlError
from app.resolvers.soundcloud import PLAYER_PARAMS, SoundCloudResolver
from app.resolvers.spotify import SpotifyResolver
from app.resolvers.suno import SunoResolver
from app.resolvers.vimeo import VimeoResolver
from app.resolvers.youtube import YouTubeResolver


class TestHelpers:
    """Tests for URL helper functions."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("https://example-author.com", "https%3A%2F%2Fexample-author.com"),
            ("a b&c=d", "a%20b%26c%3Dd"),
            ("keep!~*'()", "keep!~*'()"),
            ("", ""),
        ],
    )
    def test_encode_uri_component(self, value: str, expected: str) -> None:
        """Test encoding matches the browser's encodeURIComponent."""
        assert encode_uri_component(value) == expected

    def test_segment_after(self) -> None:
        assert segment_after("https://youtu.be/xyz789?t=10", "youtu.be/") == "xyz789"

    def test_segment_after_missing_marker(self) -> None:
        assert segment_after("https://example.com", "song/") is None

    def test_segment_after_empty_segment(self) -> None:
        assert segment_after("https://suno.com/song/", "song/") == ""


class TestYouTubeResolver:
    """Tests for YouTube resolution."""

    @pytest.fixture
    def resolver(self) -> YouTubeResolver:
        return YouTubeResolver()

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=abc123",
            "https://youtu.be/abc123",
            "https://m.youtube.com/shorts/abc123",
        ],
    )
    def test_matches(self, resolver: YouTubeResolver, url: str) -> None:
        assert resolver.matches(url)

    def test_does_not_match_other_hosts(self, resolver: YouTubeResolver) -> None:
        assert not resolver.matches("https://vimeo.com/824804225")

    def test_watch_url_with_origin(self, resolver: YouTubeResolver) -> None:
        """Test a watch URL resolves to the embed player with the encoded origin."""
        resolved = resolver.resolve(
            "https://www.youtube.com/watch?v=abc123",
            origin="https://example-author.com",
        )

        assert resolved.platform == Platform.YOUTUBE
        assert resolved.media_id == "abc123"
        assert resolved.is_embedded is True
        assert resolved.embed_url == (
            "https://www.youtube.com/embed/abc123"
            "?autoplay=0&origin=https%3A%2F%2Fexample-author.com"
        )

    def test_watch_url_with_extra_params(self, resolver: YouTubeResolver) -> None:
        """Test the v parameter is found among other query parameters."""
        video_id = resolver.extract_id("https://www.youtube.com/watch?list=PL1&v=20-3SconM1k&t=4")
        assert video_id == "20-3SconM1k"

    def test_short_link_strips_query(self, resolver: YouTubeResolver) -> None:
        assert resolver.extract_id("https://youtu.be/xyz789?t=10") == "xyz789"

    def test_shorts_url(self, resolver: YouTubeResolver) -> None:
        assert resolver.extract_id("https://www.youtube.com/shorts/sh0rt1d?feature=share") == "sh0rt1d"

    def test_empty_origin(self, resolver: YouTubeResolver) -> None:
        resolved = resolver.resolve("https://youtu.be/xyz789")
        assert resolved.embed_url == "https://www.youtube.com/embed/xyz789?autoplay=0&origin="

    def test_watch_url_without_id_is_best_effort(self, resolver: YouTubeResolver) -> None:
        """Test a recognized URL without an ID still resolves to the player."""
        resolved = resolver.resolve("https://www.youtube.com/watch?list=PL1")

        assert resolved.platform == Platform.YOUTUBE
        assert resolved.media_id is None
        assert resolved.embed_url == "https://www.youtube.com/embed/?autoplay=0&origin="

    def test_channel_url_without_id(self, resolver: YouTubeResolver) -> None:
        assert resolver.extract_id("https://www.youtube.com/@somechannel") is None

    def test_strict_mode_raises(self, resolver: YouTubeResolver) -> None:
        with pytest.raises(UnresolvableMediaUrlError) as exc_info:
            resolver.resolve("https://www.youtube.com/@somechannel", strict=True)

        assert exc_info.value.platform == "youtube"
        assert exc_info.value.url == "https://www.youtube.com/@somechannel"


class TestVimeoResolver:
    """Tests for Vimeo resolution."""

    @pytest.fixture
    def resolver(self) -> VimeoResolver:
        return VimeoResolver()

    def test_numeric_id(self, resolver: VimeoResolver) -> None:
        resolved = resolver.resolve("https://vimeo.com/824804225")

        assert resolved.platform == Platform.VIMEO
        assert resolved.media_id == "824804225"
        assert resolved.embed_url == "https://player.vimeo.com/video/824804225"

    def test_video_path_form(self, resolver: VimeoResolver) -> None:
        assert resolver.extract_id("https://player.vimeo.com/video/76979871?h=8272103f6e") == "76979871"

    def test_non_numeric_path_is_best_effort(self, resolver: VimeoResolver) -> None:
        resolved = resolver.resolve("https://vimeo.com/channels/staffpicks")

        assert resolved.media_id is None
        assert resolved.embed_url == "https://player.vimeo.com/video/"

    def test_strict_mode_raises(self, resolver: VimeoResolver) -> None:
        with pytest.raises(UnresolvableMediaUrlError):
            resolver.resolve("https://vimeo.com/channels/staffpicks", strict=True)


class TestSpotifyResolver:
    """Tests for Spotify resolution."""

    @pytest.fixture
    def resolver(self) -> SpotifyResolver:
        return SpotifyResolver()

    def test_track(self, resolver: SpotifyResolver) -> None:
        resolved = resolver.resolve("https://open.spotify.com/track/4cOdK2wGLETKBW3PvgPWqT")

        assert resolved.platform == Platform.SPOTIFY
        assert resolved.kind == MediaKind.AUDIO
        assert resolved.spotify_kind == SpotifyKind.TRACK
        assert resolved.media_id == "4cOdK2wGLETKBW3PvgPWqT"
        assert resolved.embed_url == "https://open.spotify.com/embed/track/4cOdK2wGLETKBW3PvgPWqT"

    def test_track_with_query(self, resolver: SpotifyResolver) -> None:
        resolved = resolver.resolve("https://open.spotify.com/track/4cOdK2wGLETKBW3PvgPWqT?si=abc")
        assert resolved.embed_url == "https://open.spotify.com/embed/track/4cOdK2wGLETKBW3PvgPWqT"

    @pytest.mark.parametrize(
        "sub_kind,resource_id",
        [
            (SpotifyKind.ALBUM, "1DFixLWuPkv3KT3TnV35m3"),
            (SpotifyKind.PLAYLIST, "37i9dQZF1DXcBWIGoYBM5M"),
        ],
    )
    def test_album_and_playlist(
        self, resolver: SpotifyResolver, sub_kind: SpotifyKind, resource_id: str
    ) -> None:
        resolved = resolver.resolve(f"https://open.spotify.com/{sub_kind.value}/{resource_id}")

        assert resolved.spotify_kind == sub_kind
        assert resolved.embed_url == f"https://open.spotify.com/embed/{sub_kind.value}/{resource_id}"

    def test_unknown_shape_falls_back_to_rewrite(self, resolver: SpotifyResolver) -> None:
        """Test an artist URL is returned unchanged by the naive rewrite."""
        url = "https://open.spotify.com/artist/0OdUWJ0sBjDrqHygGUXeCF"
        resolved = resolver.resolve(url)

        assert resolved.embed_url == url
        assert resolved.spotify_kind is None
        assert resolved.media_id is None

    def test_strict_mode_raises(self, resolver: SpotifyResolver) -> None:
        with pytest.raises(UnresolvableMediaUrlError):
            resolver.resolve("https://open.spotify.com/artist/0OdUWJ0sBjDrqHygGUXeCF", strict=True)


class TestSoundCloudResolver:
    """Tests for SoundCloud resolution."""

    @pytest.fixture
    def resolver(self) -> SoundCloudResolver:
        return SoundCloudResolver()

    def test_widget_url(self, resolver: SoundCloudResolver) -> None:
        url = "https://soundcloud.com/artist/track-name"
        resolved = resolver.resolve(url)

        assert resolved.platform == Platform.SOUNDCLOUD
        assert resolved.embed_url.startswith(
            "https://w.soundcloud.com/player/?url=https%3A%2F%2Fsoundcloud.com%2Fartist%2Ftrack-name"
        )
        assert resolved.embed_url.endswith(PLAYER_PARAMS)
        assert "auto_play=false" in resolved.embed_url
        assert "visual=true" in resolved.embed_url

    def test_full_url_encoded_with_query(self, resolver: SoundCloudResolver) -> None:
        """Test the whole raw URL, query included, is passed to the widget."""
        url = "https://soundcloud.com/artist/track?in=artist/sets/album"
        embed = resolver.build_embed_url(url, resolver.extract_id(url))

        assert encode_uri_component(url) in embed
        assert "%3Fin%3Dartist%2Fsets%2Falbum" in embed

    def test_permalink_id(self, resolver: SoundCloudResolver) -> None:
        assert resolver.extract_id("https://soundcloud.com/artist/track/") == "artist/track"

    def test_bare_host_has_no_id(self, resolver: SoundCloudResolver) -> None:
        assert resolver.extract_id("https://soundcloud.com/") is None


class TestSunoResolver:
    """Tests for Suno resolution."""

    @pytest.fixture
    def resolver(self) -> SunoResolver:
        return SunoResolver()

    def test_song(self, resolver: SunoResolver) -> None:
        resolved = resolver.resolve("https://suno.com/song/3f2a1b7c-1111-2222-3333-444455556666?sh=x")

        assert resolved.platform == Platform.SUNO
        assert resolved.media_id == "3f2a1b7c-1111-2222-3333-444455556666"
        assert resolved.embed_url == "https://suno.com/embed/song/3f2a1b7c-1111-2222-3333-444455556666"

    def test_no_song_segment_keeps_raw_url(self, resolver: SunoResolver) -> None:
        url = "https://suno.com/@artist"
        resolved = resolver.resolve(url)

        assert resolved.embed_url == url
        assert resolved.media_id is None

    def test_strict_mode_raises(self, resolver: SunoResolver) -> None:
        with pytest.raises(UnresolvableMediaUrlError):
            resolver.resolve("https://suno.com/@artist", strict=True)
