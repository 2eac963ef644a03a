import pytest

from nft_merkle import parse_address


# Default Hardhat accounts, mixed checksum case on purpose.
HARDHAT_ACCOUNTS = [
    "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
    "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
    "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
    "0x90F79bf6EB2c4f870365E785982E1f101E93b906",
    "0x15d34AAf54267DB7D7c367839AAf71A00a2C6A65",
]


@pytest.fixture
def raw_addresses():
    return list(HARDHAT_ACCOUNTS)


@pytest.fixture
def addresses(raw_addresses):
    return [parse_address(raw) for raw in raw_addresses]


@pytest.fixture
def leaves(addresses):
    return [address.leaf for address in addresses]


@pytest.fixture
def whitelist_file(tmp_path, raw_addresses):
    path = tmp_path / "whitelist.txt"
    lines = ["# mint pass holders", ""] + [f"  {raw}  " for raw in raw_addresses] + [""]
    path.write_text("\n".join(lines))
    return path
