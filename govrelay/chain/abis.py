# Subset of the Aragon Govern queue ABI used by the relay

_COLLATERAL_COMPONENTS = [
    {"internalType": "address", "name": "token", "type": "address"},
    {"internalType": "uint256", "name": "amount", "type": "uint256"},
]

CONTAINER_INPUT = {
    "components": [
        {
            "components": [
                {"internalType": "uint256", "name": "nonce", "type": "uint256"},
                {"internalType": "uint256", "name": "executionTime", "type": "uint256"},
                {"internalType": "address", "name": "submitter", "type": "address"},
                {"internalType": "contract IERC3000Executor", "name": "executor", "type": "address"},
                {
                    "components": [
                        {"internalType": "address", "name": "to", "type": "address"},
                        {"internalType": "uint256", "name": "value", "type": "uint256"},
                        {"internalType": "bytes", "name": "data", "type": "bytes"},
                    ],
                    "internalType": "struct ERC3000Data.Action[]",
                    "name": "actions",
                    "type": "tuple[]",
                },
                {"internalType": "bytes32", "name": "allowFailuresMap", "type": "bytes32"},
                {"internalType": "bytes", "name": "proof", "type": "bytes"},
            ],
            "internalType": "struct ERC3000Data.Payload",
            "name": "payload",
            "type": "tuple",
        },
        {
            "components": [
                {"internalType": "uint256", "name": "executionDelay", "type": "uint256"},
                {
                    "components": _COLLATERAL_COMPONENTS,
                    "internalType": "struct ERC3000Data.Collateral",
                    "name": "scheduleDeposit",
                    "type": "tuple",
                },
                {
                    "components": _COLLATERAL_COMPONENTS,
                    "internalType": "struct ERC3000Data.Collateral",
                    "name": "challengeDeposit",
                    "type": "tuple",
                },
                {"internalType": "address", "name": "resolver", "type": "address"},
                {"internalType": "bytes", "name": "rules", "type": "bytes"},
            ],
            "internalType": "struct ERC3000Data.Config",
            "name": "config",
            "type": "tuple",
        },
    ],
    "internalType": "struct ERC3000Data.Container",
    "name": "_container",
    "type": "tuple",
}

GOVERN_QUEUE_ABI = [
    {
        "inputs": [],
        "name": "nonce",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [CONTAINER_INPUT],
        "name": "schedule",
        "outputs": [{"internalType": "bytes32", "name": "containerHash", "type": "bytes32"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [CONTAINER_INPUT],
        "name": "execute",
        "outputs": [
            {"internalType": "bytes32", "name": "failureMap", "type": "bytes32"},
            {"internalType": "bytes[]", "name": "", "type": "bytes[]"},
        ],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]
