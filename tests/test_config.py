"""Tests for configuration loading."""

import json
import sys
import os

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from thiessen.config import DEFAULTS_PATH, ThiessenConfig, load_config


class TestThiessenConfig:
    def test_defaults(self):
        config = ThiessenConfig()
        assert config.random_seed == 42
        assert config.extension_factor == 4.0
        assert config.max_workers == 1
        assert config.deadline_seconds is None
        assert config.contained_sites_only is False
        assert config.allow_single_site is True
        assert config.spatial_reference is None

    def test_frozen(self):
        config = ThiessenConfig()
        with pytest.raises(ValidationError):
            config.max_workers = 4

    def test_extension_factor_lower_bound(self):
        with pytest.raises(ValidationError):
            ThiessenConfig(extension_factor=2.0)

    def test_workers_lower_bound(self):
        with pytest.raises(ValidationError):
            ThiessenConfig(max_workers=0)

    def test_unknown_key(self):
        with pytest.raises(ValidationError):
            ThiessenConfig(num_seeds=10)

    def test_spatial_reference_accepts_any_object(self):
        marker = object()
        config = ThiessenConfig(spatial_reference=marker)
        assert config.spatial_reference is marker

    def test_workers_description_mentions_gil(self):
        assert 'GIL' in ThiessenConfig.model_fields['max_workers'].description


class TestLoadConfig:
    def test_packaged_defaults(self):
        with open(DEFAULTS_PATH) as f:
            raw = json.load(f)
        config = load_config()
        assert config.random_seed == raw['random_seed']
        assert config.extension_factor == raw['extension_factor']

    def test_overrides(self):
        config = load_config(max_workers=3, spatial_reference='EPSG:3857')
        assert config.max_workers == 3
        assert config.spatial_reference == 'EPSG:3857'

    def test_custom_file(self, tmp_path):
        path = tmp_path / 'thiessen.json'
        path.write_text(json.dumps({'random_seed': 7, 'contained_sites_only': True}))
        config = load_config(str(path))
        assert config.random_seed == 7
        assert config.contained_sites_only is True
        assert config.max_workers == 1

    def test_invalid_file(self, tmp_path):
        path = tmp_path / 'bad.json'
        path.write_text(json.dumps({'extension_factor': 1.0}))
        with pytest.raises(ValidationError):
            load_config(str(path))
