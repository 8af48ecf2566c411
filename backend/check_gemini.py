"""
Manual smoke check for the Gemini vision integration (hits the live API)
"""
import base64
import logging
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from dressgenius.config import settings
from dressgenius.dependencies import get_vision_service
from dressgenius.utils.gemini_client import GeminiError, GeminiQuotaError

# Configure detailed logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# 1x1 red PNG
TEST_IMAGE_BASE64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="


def check_gemini_vision() -> int:
    print("=" * 60)
    print("Checking Gemini vision")
    print("=" * 60)

    print("\n1. Checking GEMINI_API_KEY...")
    if not settings.GEMINI_API_KEY:
        print("❌ GEMINI_API_KEY is not set!")
        print("   Please set it in your .env file or environment variables")
        return 1
    print(f"✅ GEMINI_API_KEY is set (length: {len(settings.GEMINI_API_KEY)} characters)")

    service = get_vision_service()
    print(f"\n2. Candidate models: {', '.join(service.models)}")

    print("\n3. Calling analyze_outfit_image...")
    try:
        result = service.analyze_outfit_image(base64.b64decode(TEST_IMAGE_BASE64), "image/png")
    except GeminiQuotaError as e:
        print("\n❌ Quota exhausted")
        print(f"   Retry after: {e.retry_after}s")
        print("   → Wait for quota reset or enable billing in Google AI Studio")
        return 1
    except GeminiError as e:
        print("\n❌ FAILED!")
        print(f"   Status: {e.status}")
        print(f"   Message: {str(e)[:500]}")
        return 1

    print("\n✅ SUCCESS!")
    print(f"   Description: {result.get('description')!r}")
    print(f"   Items: {result.get('items')}")
    print("\n" + "=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(check_gemini_vision())
