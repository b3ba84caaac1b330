"""ABI of the news registry contract."""

from typing import Any

DEFAULT_CONTRACT_ADDRESS = "0x85dD1663091a31ACD2676BF975C172FC8aE8B659"

NEWS_UPLOADED_SIGNATURE = "NewsUploaded(string,string,uint256,address)"

NEWS_REGISTRY_ABI: list[dict[str, Any]] = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": False, "internalType": "string", "name": "ipfsHash", "type": "string"},
            {"indexed": False, "internalType": "string", "name": "title", "type": "string"},
            {"indexed": False, "internalType": "uint256", "name": "timestamp", "type": "uint256"},
            {"indexed": False, "internalType": "address", "name": "author", "type": "address"},
        ],
        "name": "NewsUploaded",
        "type": "event",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "_index", "type": "uint256"}],
        "name": "getNews",
        "outputs": [
            {"internalType": "string", "name": "", "type": "string"},
            {"internalType": "string", "name": "", "type": "string"},
            {"internalType": "uint256", "name": "", "type": "uint256"},
            {"internalType": "address", "name": "", "type": "address"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "newsCount",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "string", "name": "_ipfsHash", "type": "string"},
            {"internalType": "string", "name": "_title", "type": "string"},
        ],
        "name": "uploadNews",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]
