import httpx
import time
import sys

API_BASE = "http://localhost:8000/api/v1"
GUIDELINES = "Voice is warm, confident and plain-spoken. Avoid jargon and superlatives."
TARGET_URLS = "https://example.com/"


def run_audit(urls: str = TARGET_URLS, guidelines: str = GUIDELINES):
    print(f"Starting audit for {urls}...")
    try:
        resp = httpx.post(
            f"{API_BASE}/audit/jobs",
            json={"guidelineText": guidelines, "urls": urls, "autoDiscover": False},
            timeout=30.0,
        )
        resp.raise_for_status()
        job_id = resp.json()["jobId"]
        print(f"Audit started. Job ID: {job_id}")

        printed = 0
        while True:
            status_resp = httpx.get(f"{API_BASE}/audit/jobs/{job_id}", timeout=10.0)
            status_resp.raise_for_status()
            job = status_resp.json()

            for line in job.get("logs", [])[printed:]:
                print(line)
            printed = len(job.get("logs", []))

            if job["status"] == "completed":
                break
            if job["status"] == "failed":
                print(f"Audit failed: {job.get('error')}")
                return

            time.sleep(2)

        for result in job.get("results", []):
            if result["status"] == "success":
                print(f"{result['url']}: {result['report']['complianceScore']}%")
            else:
                print(f"{result['url']}: error - {result.get('errorMessage')}")

        export_resp = httpx.get(f"{API_BASE}/audit/jobs/{job_id}/export", params={"format": "markdown"}, timeout=30.0)
        export_resp.raise_for_status()

        filename = "content-audit-results.md"
        with open(filename, "w", encoding="utf-8") as f:
            f.write(export_resp.text)
        print(f"Report saved to {filename}")

    except httpx.HTTPError as e:
        print(f"Error: {e}")


if __name__ == "__main__":
    run_audit(*sys.argv[1:3])
