import os

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _split_csv(value: str) -> list:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_grace_periods(value: str) -> dict:
    """Parse `daoName=seconds,otherDao=seconds` into {name: seconds}."""
    periods = {}
    for item in _split_csv(value):
        name, _, seconds = item.partition("=")
        if not name.strip() or not seconds.strip().isdigit():
            raise ValueError(f"DAO_GRACE_SECONDS entries must look like 'daoName=seconds', got '{item}'")
        periods[name.strip()] = int(seconds)
    return periods


# --------------------------------------------------
# Witnet Node Configuration
# --------------------------------------------------
WITNET_NODE_URL = os.environ.get("WITNET_NODE_URL", "http://localhost:21338")
# How long to wait for a data request to be tallied before giving up
ORACLE_TALLY_TIMEOUT_SECONDS = float(os.environ.get("ORACLE_TALLY_TIMEOUT_SECONDS", "900"))
ORACLE_POLL_INTERVAL_SECONDS = float(os.environ.get("ORACLE_POLL_INTERVAL_SECONDS", "15"))
ORACLE_HTTP_TIMEOUT_SECONDS = float(os.environ.get("ORACLE_HTTP_TIMEOUT_SECONDS", "30"))

# Data request parameters (amounts in nanoWits)
ORACLE_WITNESSES = int(os.environ.get("ORACLE_WITNESSES", "3"))
ORACLE_MIN_CONSENSUS_PERCENTAGE = int(os.environ.get("ORACLE_MIN_CONSENSUS_PERCENTAGE", "51"))
ORACLE_WITNESS_REWARD = int(os.environ.get("ORACLE_WITNESS_REWARD", "1000000"))
ORACLE_COMMIT_AND_REVEAL_FEE = int(os.environ.get("ORACLE_COMMIT_AND_REVEAL_FEE", "100000"))
ORACLE_COLLATERAL = int(os.environ.get("ORACLE_COLLATERAL", "1000000000"))
ORACLE_REQUEST_FEE = int(os.environ.get("ORACLE_REQUEST_FEE", "100000"))

# --------------------------------------------------
# Reaction Monitors
# --------------------------------------------------
# Each template is formatted with {channel_id} and {message_id}; every monitor
# becomes one retrieval source of the data request.
REACTION_MONITOR_URLS = _split_csv(
    os.environ.get(
        "REACTION_MONITOR_URLS",
        "https://witnet-reactions-monitor.herokuapp.com/channels/{channel_id}/messages/{message_id},"
        "https://aragon-reactions-monitor.herokuapp.com/channels/{channel_id}/messages/{message_id},"
        "https://otherplane-reactions-monitor.herokuapp.com/channels/{channel_id}/messages/{message_id}",
    )
)
REACTION_MONITOR_INVITES = _split_csv(os.environ.get("REACTION_MONITOR_INVITES", ""))

# --------------------------------------------------
# Ethereum Configuration
# --------------------------------------------------
ETHEREUM_RPC_URL = os.environ.get("ETHEREUM_RPC_URL", "http://localhost:8545")
RELAYER_PRIVATE_KEY = os.environ.get("RELAYER_PRIVATE_KEY")
CHAIN_RECEIPT_TIMEOUT_SECONDS = float(os.environ.get("CHAIN_RECEIPT_TIMEOUT_SECONDS", "300"))
ETHERSCAN_HOST = os.environ.get("ETHERSCAN_HOST", "etherscan.io")

# --------------------------------------------------
# Govern Subgraph Configuration
# --------------------------------------------------
GOVERN_SUBGRAPH_URL = os.environ.get(
    "GOVERN_SUBGRAPH_URL",
    "https://api.thegraph.com/subgraphs/name/aragon/aragon-govern-mainnet",
)

# --------------------------------------------------
# Orchestrator Configuration
# --------------------------------------------------
# Wait between reporting an outcome and executing it, unless the DAO overrides it
EXECUTION_GRACE_SECONDS = int(os.environ.get("EXECUTION_GRACE_SECONDS", "60"))
# Per-DAO grace periods applied when a guild binds the DAO: "daoName=seconds,..."
DAO_GRACE_SECONDS = _parse_grace_periods(os.environ.get("DAO_GRACE_SECONDS", ""))
# Longest single timer delay; longer deadlines are re-armed in chunks of this size
MAX_TIMER_DELAY_SECONDS = float(os.environ.get("MAX_TIMER_DELAY_SECONDS", str(24 * 60 * 60)))

# --------------------------------------------------
# Chat Reply Configuration
# --------------------------------------------------
CHAT_REPLY_WEBHOOK_URL = os.environ.get("CHAT_REPLY_WEBHOOK_URL")
CHAT_REPLY_TOKEN = os.environ.get("CHAT_REPLY_TOKEN")

# --------------------------------------------------
# API Configuration
# --------------------------------------------------
REQUIRED_API_KEY = os.environ.get("GOVRELAY_TOKEN")
ALLOWED_ORIGINS = _split_csv(os.environ.get("ALLOWED_ORIGINS", ""))
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8080"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
