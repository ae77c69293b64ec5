"""
Tests for the AI gateway client and the cache service helpers.
"""

import pytest

from vocab_images.errors import NoImageProduced
from vocab_images.models import VocabularyImage
from vocab_images.services import image_generation, vocabulary_images
from conftest import PNG_BYTES, PNG_DATA_URL, gateway_payload


class TestPrompt:
    """Tests for prompt building."""

    def test_vietnamese_prompt(self):
        """Test the Vietnamese prompt."""
        prompt = image_generation.build_prompt('con mèo', 'vi')

        assert 'Vietnamese vocabulary word: "con mèo"' in prompt
        assert 'No text in the image' in prompt
        assert 'flat design' in prompt

    def test_chinese_prompt(self):
        """Test the Chinese prompt."""
        prompt = image_generation.build_prompt('猫', 'zh')

        assert 'Chinese vocabulary word: "猫"' in prompt

    def test_templates_differ_only_by_language(self):
        """Test that both prompts share one template."""
        vi = image_generation.build_prompt('trà', 'vi')
        zh = image_generation.build_prompt('trà', 'zh')

        assert vi.replace('Vietnamese', 'Chinese') == zh


class TestGatewayRequest:
    """Tests for the AI gateway call."""

    def test_request_shape(self, app, gateway):
        """Test the gateway request body and headers."""
        with app.app_context():
            image = image_generation.generate_image('con chó', 'vi')

        assert image == PNG_DATA_URL
        call = gateway.calls[0]
        assert call['url'] == 'https://gateway.test/v1/chat/completions'
        assert call['headers']['Authorization'] == 'Bearer test-gateway-key'
        assert call['timeout'] == 5
        assert call['json']['modalities'] == ['image', 'text']
        assert call['json']['model'] == app.config['IMAGE_MODEL']
        assert call['json']['messages'][0]['role'] == 'user'
        assert '"con chó"' in call['json']['messages'][0]['content']

    def test_non_json_body(self, app, gateway):
        """Test a gateway response that is not JSON."""
        gateway.respond(200, payload=None, text='<html>')

        with app.app_context():
            with pytest.raises(image_generation.GenerationFailed):
                image_generation.generate_image('con chó', 'vi')

    def test_extract_image_missing_fields(self):
        """Test extracting an image from incomplete payloads."""
        assert image_generation.extract_image({}) is None
        assert image_generation.extract_image({'choices': []}) is None
        assert image_generation.extract_image(gateway_payload(image=None)) is None

    def test_decode_data_url(self):
        """Test decoding a data URL."""
        assert image_generation.decode_image(PNG_DATA_URL) == PNG_BYTES

    def test_decode_bare_base64(self):
        """Test decoding base64 without a data URL prefix."""
        assert image_generation.decode_image(PNG_DATA_URL.split(',', 1)[1]) == PNG_BYTES


class TestNormalization:
    """Tests for key and language normalization."""

    def test_vocabulary_key(self):
        """Test vocabulary key normalization."""
        assert vocabulary_images.normalize_vocabulary_key(' Xin   chào ') == 'xin_chào'
        assert vocabulary_images.normalize_vocabulary_key('xin chào') == 'xin_chào'
        assert vocabulary_images.normalize_vocabulary_key('你好') == '你好'
        assert vocabulary_images.normalize_vocabulary_key('a\tb\nc') == 'a_b_c'

    def test_language(self):
        """Test language normalization."""
        assert vocabulary_images.normalize_language('ZH') == 'zh'
        assert vocabulary_images.normalize_language(' vi ') == 'vi'
        assert vocabulary_images.normalize_language('zh-CN') == 'zh'
        assert vocabulary_images.normalize_language('en') == 'vi'
        assert vocabulary_images.normalize_language(None) == 'vi'

    def test_file_name_is_unique_per_call(self, monkeypatch):
        """Test that file names carry a timestamp."""
        monkeypatch.setattr(vocabulary_images.time, 'time', lambda: 1700000000.5)

        assert vocabulary_images.build_file_name('xin_chào', 'vi') == 'xin_chào_vi_1700000000500.png'


class TestCacheService:
    """Tests for the cache helpers."""

    def test_cache_write_conflict_keeps_first_entry(self, db_session):
        """Test that a duplicate insert keeps the existing entry."""
        assert vocabulary_images.cache_image_url('mèo', 'vi', 'https://cdn.example.com/1.png') is True
        assert vocabulary_images.cache_image_url('mèo', 'vi', 'https://cdn.example.com/2.png') is False

        entries = VocabularyImage.query.filter_by(vocabulary_key='mèo').all()
        assert [entry.image_url for entry in entries] == ['https://cdn.example.com/1.png']

    def test_cache_lookup(self, db_session):
        """Test a direct cache lookup."""
        vocabulary_images.cache_image_url('chó', 'vi', 'https://cdn.example.com/cho.png')

        assert vocabulary_images.get_cached_image_url('chó', 'vi') == 'https://cdn.example.com/cho.png'
        assert vocabulary_images.get_cached_image_url('chó', 'zh') is None

    def test_undecodable_image(self, db_session, gateway, bucket):
        """Test a gateway image that cannot be decoded."""
        gateway.respond(200, gateway_payload(image='data:image/png;base64,@@@'))

        with pytest.raises(NoImageProduced):
            vocabulary_images.get_vocabulary_image('chó', 'vi')
        assert bucket.uploads == []

    def test_purge_removes_entries_and_files(self, db_session, bucket):
        """Test purging one language of a word."""
        vocabulary_images.cache_image_url('xin_chào', 'vi', 'https://cdn.example.com/a.png')
        vocabulary_images.cache_image_url('xin_chào', 'zh', 'https://cdn.example.com/b.png')
        vocabulary_images.cache_image_url('tạm_biệt', 'vi', 'https://cdn.example.com/c.png')

        deleted = vocabulary_images.purge_cached_images('Xin chào', 'vi')

        assert deleted == 1
        assert bucket.deleted == ['https://cdn.example.com/a.png']
        assert vocabulary_images.count_cached_images() == 2

    def test_purge_all_languages(self, db_session, bucket):
        """Test purging every language of a word."""
        vocabulary_images.cache_image_url('xin_chào', 'vi', 'https://cdn.example.com/a.png')
        vocabulary_images.cache_image_url('xin_chào', 'zh', 'https://cdn.example.com/b.png')

        assert vocabulary_images.purge_cached_images('xin chào', delete_files=False) == 2
        assert bucket.deleted == []
        assert vocabulary_images.count_cached_images() == 0

    def test_to_dict(self, db_session):
        """Test model serialization."""
        vocabulary_images.cache_image_url('trà', 'zh', 'https://cdn.example.com/tra.png')
        entry = VocabularyImage.query.first()

        data = entry.to_dict()

        assert data['vocabulary_key'] == 'trà'
        assert data['language'] == 'zh'
        assert data['image_url'] == 'https://cdn.example.com/tra.png'
        assert data['created_at'] is not None
