import json
import logging

import pytest

from nft_merkle import EmptyInputError, MalformedAddressError, MerkleTree, MissingArtifactError
from nft_merkle.hashing import to_hex
from nft_merkle.whitelist import (
    DATA_FILENAME,
    ROOT_FILENAME,
    WhitelistData,
    build_whitelist,
    load_whitelist_data,
    main,
    parse_whitelist,
    read_whitelist,
    write_whitelist_artifacts,
)


def test_parse_skips_blank_and_comment_lines(raw_addresses):
    text = "address\n\n# team\n" + "\n".join(raw_addresses) + "\n\n"
    parsed = parse_whitelist(text)
    assert [a.value for a in parsed] == [raw.lower() for raw in raw_addresses]


def test_parse_reports_malformed_line():
    with pytest.raises(MalformedAddressError, match="line 2"):
        parse_whitelist("0x" + "11" * 20 + "\n0x1234\n")


def test_parse_keeps_duplicates_and_warns(caplog):
    entry = "0x" + "ab" * 20
    with caplog.at_level(logging.WARNING, logger="nft_merkle.whitelist"):
        parsed = parse_whitelist(f"{entry}\n{entry.upper().replace('0X', '0x')}\n")
    assert len(parsed) == 2
    assert parsed[0] == parsed[1]
    assert "more than once" in caplog.text


def test_read_bom_prefixed_crlf_file(tmp_path):
    first, second = "0x" + "11" * 20, "0x" + "22" * 20
    path = tmp_path / "whitelist.txt"
    path.write_bytes(f"\ufeff{first}\r\n{second}\r\n".encode("utf-8"))
    assert [a.value for a in read_whitelist(path)] == [first, second]


def test_parse_strips_stray_byte_order_mark():
    entry = "0x" + "33" * 20
    assert [a.value for a in parse_whitelist(f"\ufeff{entry}\n")] == [entry]


def test_read_file_that_is_not_utf8(tmp_path):
    path = tmp_path / "whitelist.txt"
    path.write_bytes(("0x" + "11" * 20 + "\n").encode() + b"\xff\xfe\n")
    with pytest.raises(MalformedAddressError, match="not UTF-8"):
        read_whitelist(path)


def test_read_missing_file(tmp_path):
    with pytest.raises(MissingArtifactError):
        read_whitelist(tmp_path / "absent.txt")


def test_read_file_without_addresses(tmp_path):
    path = tmp_path / "whitelist.txt"
    path.write_text("# nobody yet\n\n")
    with pytest.raises(EmptyInputError):
        read_whitelist(path)


def test_build_whitelist_empty():
    with pytest.raises(EmptyInputError):
        build_whitelist([])


def test_build_whitelist_data(addresses):
    tree, data = build_whitelist(addresses)
    assert data.merkle_root == to_hex(MerkleTree.from_addresses(addresses).root)
    assert data.total_addresses == len(addresses)
    assert data.addresses == [a.value for a in addresses]
    assert data.tree == tree.render()


def test_artifacts_round_trip(tmp_path, addresses):
    _, data = build_whitelist(addresses)
    root_path, data_path = write_whitelist_artifacts(data, tmp_path / "out")
    assert root_path.read_text() == data.merkle_root
    payload = json.loads(data_path.read_text())
    assert set(payload) == {"merkleRoot", "totalAddresses", "addresses", "tree"}
    assert payload["totalAddresses"] == len(addresses)
    assert load_whitelist_data(data_path) == data


def test_load_missing_data_file(tmp_path):
    with pytest.raises(MissingArtifactError):
        load_whitelist_data(tmp_path / DATA_FILENAME)


def test_load_invalid_data_file(tmp_path):
    path = tmp_path / DATA_FILENAME
    path.write_text('{"merkleRoot": "0x00"}')
    with pytest.raises(MissingArtifactError):
        load_whitelist_data(path)
    path.write_text("not json")
    with pytest.raises(MissingArtifactError):
        load_whitelist_data(path)


def test_cli_writes_root_and_data(tmp_path, whitelist_file, addresses, capsys):
    out_dir = tmp_path / "out"
    assert main([str(whitelist_file), "--out-dir", str(out_dir)]) == 0
    root = to_hex(MerkleTree.from_addresses(addresses).root)
    assert (out_dir / ROOT_FILENAME).read_text() == root
    assert json.loads((out_dir / DATA_FILENAME).read_text())["merkleRoot"] == root
    assert root in capsys.readouterr().out


def test_cli_writes_all_proofs(tmp_path, whitelist_file, addresses):
    proofs_path = tmp_path / "proofs.json"
    assert main([str(whitelist_file), "--out-dir", str(tmp_path), "--proofs-out", str(proofs_path)]) == 0
    payload = json.loads(proofs_path.read_text())
    tree = MerkleTree.from_addresses(addresses)
    assert payload["merkleRoot"] == to_hex(tree.root)
    assert [entry["address"] for entry in payload["proofs"]] == [a.value for a in addresses]
    assert payload["proofs"][2]["proof"] == [to_hex(node) for node in tree.get_proof(2)]


def test_cli_defaults_from_environment(tmp_path, whitelist_file, monkeypatch):
    monkeypatch.setenv("WHITELIST_FILE", str(whitelist_file))
    monkeypatch.setenv("NFT_MERKLE_OUT_DIR", str(tmp_path / "env-out"))
    assert main([]) == 0
    assert (tmp_path / "env-out" / ROOT_FILENAME).exists()


def test_cli_missing_file_exits_non_zero(tmp_path, capsys):
    assert main([str(tmp_path / "absent.txt"), "--out-dir", str(tmp_path)]) == 1
    assert "not found" in capsys.readouterr().err
    assert not (tmp_path / ROOT_FILENAME).exists()


def test_whitelist_data_json_keys():
    data = WhitelistData(merkle_root="0x" + "00" * 32, addresses=["0x" + "11" * 20])
    assert data.to_json() == {
        "merkleRoot": "0x" + "00" * 32,
        "totalAddresses": 1,
        "addresses": ["0x" + "11" * 20],
        "tree": "",
    }


def test_cli_file_that_is_not_utf8(tmp_path, capsys):
    path = tmp_path / "whitelist.txt"
    path.write_bytes(("0x" + "11" * 20 + "\n").encode() + b"\xff\xfe\n")
    assert main([str(path), "--out-dir", str(tmp_path)]) == 1
    assert "not UTF-8" in capsys.readouterr().err
    assert not (tmp_path / ROOT_FILENAME).exists()
