# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

from importlib.metadata import EntryPoint
from types import SimpleNamespace

import pytest

from ninetails.cli.plugins import list_classifiers
from ninetails.errors import ConfigurationError
from ninetails.plugins import Classifier, ClassifierRegistry
from ninetails.plugins import registry as registry_module
from ninetails.plugins.builtin.keras import KerasClassifier

GROUP = registry_module.ENTRY_POINT_GROUP


@pytest.fixture
def fake_entry_points(monkeypatch):
    eps = [
        EntryPoint('keras', 'ninetails.plugins.builtin.keras:KerasClassifier', GROUP),
        EntryPoint('broken', 'ninetails.plugins.no_such_module:Missing', GROUP),
        EntryPoint('notaclassifier', 'ninetails.core.gaf:GAFEncoder', GROUP),
    ]
    monkeypatch.setattr(registry_module, 'entry_points', lambda group: eps)
    return eps


class TestClassifierABC:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            Classifier()

    def test_defaults(self):
        class Minimal(Classifier):
            name = 'minimal'

            def predict(self, batch):
                return batch

        clf = Minimal()
        assert clf.labels == ('A', 'C', 'G', 'U')
        assert clf.reference_label == 'A'
        assert clf.version == '0.0.0'
        assert clf.configure(None) is None


class TestClassifierRegistry:
    def test_discover(self, fake_entry_points):
        registry = ClassifierRegistry().discover()
        assert registry.names == ['broken', 'keras', 'notaclassifier']
        assert isinstance(registry.get('keras'), KerasClassifier)

    def test_unknown_or_broken(self, fake_entry_points):
        registry = ClassifierRegistry().discover()
        assert registry.get('svm') is None
        assert registry.get('broken') is None
        assert registry.get('notaclassifier') is None

    def test_list_available(self, fake_entry_points):
        available = ClassifierRegistry().discover().list_available()
        assert available['keras']['builtin']
        assert available['keras']['labels'] == 'A,C,G,U'
        assert available['broken']['description'] == '(load failed)'

    def test_list_classifiers_command(self, fake_entry_points, capsys):
        list_classifiers(SimpleNamespace())
        out = capsys.readouterr().out
        assert 'keras' in out
        assert '(built-in)' in out


class TestKerasClassifier:
    def test_needs_model(self):
        clf = KerasClassifier()
        clf.configure(SimpleNamespace(model=None, batch_size=32))
        assert clf.batch_size == 32
        with pytest.raises(ConfigurationError, match='--model'):
            clf.load()

    def test_missing_model_file(self, tmp_path):
        clf = KerasClassifier()
        clf.configure(SimpleNamespace(model=str(tmp_path / 'model.h5')))
        with pytest.raises(ConfigurationError, match='not found'):
            clf.load()

    def test_predict_before_load(self):
        with pytest.raises(ConfigurationError):
            KerasClassifier().predict([])
