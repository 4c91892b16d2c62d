import asyncio
import os

from dotenv import load_dotenv

from x402_agent import create_wallet_from_env

load_dotenv()

API_URL = os.getenv("API_URL", "http://localhost:4021")
ENDPOINT = f"{API_URL}/weather"
NETWORK = os.getenv("X402_NETWORK", "eip155:84532")


async def main() -> None:
    async with create_wallet_from_env(network=NETWORK, max_payment=5) as wallet:
        print("Wallet:", wallet.address)
        balance = await wallet.get_balance()
        print("Balance:", balance.formatted, balance.currency)

        result = await wallet.get(ENDPOINT)
        print("Status:", result.status)
        print("Paid:", result.paid)
        print("Body:", result.data)


if __name__ == "__main__":
    asyncio.run(main())
