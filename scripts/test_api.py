"""
Quick API smoke test against a running service
"""

import httpx
import asyncio


async def test_api():
    """Test NewsCred API endpoints"""

    base_url = "http://localhost:8001"
    headers = {"X-User-Id": "smoke-test"}

    print("Testing NewsCred API...")
    print("=" * 50)

    async with httpx.AsyncClient(timeout=30.0) as client:
        print("\n1. Health check...")
        response = await client.get(f"{base_url}/health")
        print(f"Status: {response.status_code}")
        print(f"Response: {response.json()}")

        print("\n2. Analyze endpoint...")
        article = (
            "SHOCKING TRUTH!!! You won't believe what experts hate about this "
            "amazing, incredible trick!!!! Secret revealed!"
        )
        response = await client.post(f"{base_url}/analyze", json={"text": article}, headers=headers)
        print(f"Status: {response.status_code}")
        verdict = response.json()
        print(f"Prediction: {verdict.get('prediction')} ({verdict.get('confidence')}%)")
        for factor in verdict.get("keyFactors", []):
            print(f"  - {factor}")

        print("\n3. Feedback endpoint...")
        response = await client.post(
            f"{base_url}/feedback",
            json={
                "article_text": article,
                "model_prediction": verdict.get("prediction", "fake"),
                "confidence_score": verdict.get("confidence", 90),
                "user_rating": 5,
                "user_feedback": "Clearly clickbait, the verdict is right.",
            },
            headers=headers,
        )
        print(f"Status: {response.status_code}")
        print(f"Response: {response.json()}")

        print("\n4. Training insights...")
        response = await client.get(f"{base_url}/training/insights", headers=headers)
        print(f"Response: {response.json()}")

    print("\n" + "=" * 50)
    print("Test completed")


if __name__ == "__main__":
    asyncio.run(test_api())
