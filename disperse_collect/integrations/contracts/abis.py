"""
Minimal ABIs for the contracts the service talks to.

Only the functions actually called are listed.
"""


def _fn(name, inputs, outputs=(), mutability="nonpayable"):
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
        "stateMutability": mutability,
    }


ERC20_ABI = [
    _fn("balanceOf", [("account", "address")], [("", "uint256")], "view"),
    _fn("allowance", [("owner", "address"), ("spender", "address")], [("", "uint256")], "view"),
    _fn("transfer", [("to", "address"), ("value", "uint256")], [("", "bool")]),
    _fn("approve", [("spender", "address"), ("value", "uint256")], [("", "bool")]),
]

DISPERSE_COLLECT_ABI = [
    _fn(
        "disperseEth",
        [("recipients", "address[]"), ("values", "uint256[]")],
        mutability="payable",
    ),
    _fn(
        "disperseERC20",
        [
            ("spender", "address"),
            ("token", "address"),
            ("recipients", "address[]"),
            ("values", "uint256[]"),
        ],
    ),
    _fn(
        "collectERC20",
        [
            ("token", "address"),
            ("recipient", "address"),
            ("spenders", "address[]"),
            ("values", "uint256[]"),
        ],
    ),
]
