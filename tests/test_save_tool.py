import os

import pytest

import vc_save_tool
from conftest import build_save
from vc_blocks import SaveType
from vc_savefile import SaveFile


def answer(monkeypatch, text):
    monkeypatch.setattr('builtins.input', lambda prompt='': text)


def test_info_prints_block_table(write_save, retail_bytes, capsys):
    path = write_save(retail_bytes)
    assert vc_save_tool.main([path, '--info']) == 0

    out = capsys.readouterr().out
    assert "Successfully loaded" in out
    assert "RETAIL" in out
    assert "0x000708" in out
    with open(path, 'rb') as f:
        assert f.read() == retail_bytes


def test_convert_with_prompt_and_backup(write_save, retail_bytes, steam_bytes, monkeypatch, capsys):
    path = write_save(retail_bytes)
    answer(monkeypatch, 'y')

    assert vc_save_tool.main([path]) == 0

    with open(path, 'rb') as f:
        assert f.read() == steam_bytes
    with open(path + '.bak', 'rb') as f:
        assert f.read() == retail_bytes

    out = capsys.readouterr().out
    assert "backed up to" in out
    assert "from RETAIL to STEAM" in out


@pytest.mark.parametrize('reply', ['n', '', 'no', ' y'])
def test_anything_but_yes_aborts(write_save, steam_bytes, monkeypatch, capsys, reply):
    path = write_save(steam_bytes)
    answer(monkeypatch, reply)

    assert vc_save_tool.main([path]) == 1
    assert "User aborted" in capsys.readouterr().out
    assert not os.path.exists(path + '.bak')
    with open(path, 'rb') as f:
        assert f.read() == steam_bytes


def test_eof_at_prompt_aborts(write_save, retail_bytes, monkeypatch):
    def raise_eof(prompt=''):
        raise EOFError
    monkeypatch.setattr('builtins.input', raise_eof)

    assert vc_save_tool.main([write_save(retail_bytes)]) == 1


def test_yes_flag_with_output(write_save, tmp_path, steam_bytes, retail_bytes):
    path = write_save(steam_bytes)
    output = str(tmp_path / "retail.b")

    assert vc_save_tool.main([path, '-y', '-o', output]) == 0

    with open(output, 'rb') as f:
        assert f.read() == retail_bytes
    with open(path, 'rb') as f:
        assert f.read() == steam_bytes
    assert not os.path.exists(path + '.bak')


def test_no_backup(write_save, retail_bytes):
    path = write_save(retail_bytes)
    assert vc_save_tool.main([path, '-y', '--no-backup']) == 0
    assert not os.path.exists(path + '.bak')
    assert SaveFile.load(path).save_type == SaveType.STEAM


@pytest.mark.parametrize('fixture', ['android_bytes', 'ios_bytes'])
def test_mobile_saves_rejected(request, write_save, capsys, fixture):
    path = write_save(request.getfixturevalue(fixture))
    assert vc_save_tool.main([path, '-y']) == 1
    assert "Android and iOS saves are not supported" in capsys.readouterr().out


def test_unknown_save_rejected(write_save, capsys):
    path = write_save(build_save(marker_byte=0x00))
    assert vc_save_tool.main([path, '-y']) == 1
    assert "Cannot determine save type" in capsys.readouterr().out


def test_bad_checksum_reported(write_save, retail_bytes, capsys):
    data = bytearray(retail_bytes)
    data[-1] ^= 0xFF
    assert vc_save_tool.main([write_save(bytes(data)), '-y']) == 1

    out = capsys.readouterr().out
    assert "ERROR: Save file possibly corrupted" in out


def test_wrong_size_reported(write_save, retail_bytes, capsys):
    assert vc_save_tool.main([write_save(retail_bytes[:-1])]) == 1
    assert "MUST BE 0x31464 BYTES LARGE" in capsys.readouterr().out


def test_missing_file_reported(tmp_path, capsys):
    assert vc_save_tool.main([str(tmp_path / "nope.b")]) == 1
    assert "ERROR:" in capsys.readouterr().out
