from wallet_bridge.models.account import Account
from wallet_bridge.models.wallet_link import WalletLink
