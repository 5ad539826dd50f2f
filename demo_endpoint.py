"""
Quick demo script to run the Zipplign backend locally.

Starts a local server with auto-reload and prints the available endpoints.
"""

import uvicorn

if __name__ == "__main__":
    print("=" * 60)
    print("Starting Zipplign Backend Demo")
    print("=" * 60)
    print()
    print("API Endpoints:")
    print("   - Health Check:     GET  http://localhost:8000/health")
    print("   - Recommendations:  POST http://localhost:8000/recommendations/query")
    print("   - Trending Tags:    GET  http://localhost:8000/recommendations/trending-tags")
    print("   - API Docs:              http://localhost:8000/docs")
    print()
    print("Authentication:")
    print("   All endpoints (except /health) require:")
    print("   Authorization: Bearer <supabase access token>")
    print()
    print("Test with curl:")
    print('   curl -X POST "http://localhost:8000/recommendations/query" \\')
    print('     -H "Authorization: Bearer $TOKEN" \\')
    print('     -H "Content-Type: application/json" \\')
    print('     -d \'{"viewingHistory": ["zc_1"], "numRecommendations": 3}\'')
    print()
    print("=" * 60)

    uvicorn.run(
        "zipplign.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
