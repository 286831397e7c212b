import logging
import os

import pytest

from varprot.constants import VarprotNamespace
from varprot.util import DEVNULL, LOG, Log, bash_expands, filepath, log_arguments, mkdirp


class TestLog:
    def test_message_indented(self, caplog):
        with caplog.at_level(logging.INFO):
            Log().indent()('hello', 'world')
        assert caplog.records[-1].getMessage().endswith('  hello world')

    def test_warning_level(self, caplog):
        with caplog.at_level(logging.INFO):
            LOG.warning('careful')
        assert caplog.records[-1].levelno == logging.WARNING

    def test_dedent_floor(self):
        log = Log().dedent()
        assert log.indent_level == 0
        assert Log().indent().indent().dedent().indent_level == 1

    def test_devnull_silent(self, caplog):
        with caplog.at_level(logging.DEBUG):
            DEVNULL('nothing')
            DEVNULL.warning('nothing')
            DEVNULL.indent()('nothing')
        assert not caplog.records

    def test_log_arguments(self, caplog):
        args = VarprotNamespace(output='out.fa', annotations=['a.gtf', 'b.gtf'], threads=2, sample=None)
        with caplog.at_level(logging.INFO):
            log_arguments(args)
        messages = [r.getMessage() for r in caplog.records]
        assert any(["annotations = [" in m for m in messages])
        assert any(["'b.gtf'" in m for m in messages])
        assert any(["threads = 2" in m for m in messages])
        assert any(["sample = None" in m for m in messages])


class TestFilePaths:
    def test_bash_expands(self, tmp_path):
        for name in ['a.fa', 'b.fa', 'c.gtf']:
            (tmp_path / name).write_text('')
        result = bash_expands(str(tmp_path / '{a,b}.fa'))
        assert sorted([os.path.basename(f) for f in result]) == ['a.fa', 'b.fa']
        assert all([os.path.isabs(f) for f in result])

    def test_bash_expands_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            bash_expands(str(tmp_path / '*.vcf'))

    def test_filepath(self, tmp_path):
        (tmp_path / 'a.fa').write_text('')
        assert filepath(str(tmp_path / '*.fa')) == str(tmp_path / 'a.fa')

    def test_filepath_multiple_matches(self, tmp_path):
        (tmp_path / 'a.fa').write_text('')
        (tmp_path / 'b.fa').write_text('')
        with pytest.raises(TypeError):
            filepath(str(tmp_path / '*.fa'))

    def test_filepath_missing(self, tmp_path):
        with pytest.raises(TypeError):
            filepath(str(tmp_path / 'a.fa'))

    def test_mkdirp(self, tmp_path):
        dirname = str(tmp_path / 'x' / 'y')
        assert mkdirp(dirname) == dirname
        assert os.path.isdir(dirname)
        mkdirp(dirname)

    def test_mkdirp_file_exists(self, tmp_path):
        path = tmp_path / 'x'
        path.write_text('')
        with pytest.raises(OSError):
            mkdirp(str(path))
