from typing import NewType

Address = NewType("Address", str)
Uint256 = NewType("Uint256", int)
Bytes32 = NewType("Bytes32", bytes)
