"""Event simulation harness for local testing."""

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any, Optional
from urllib.parse import quote_plus

# =============================================================================
# Ensure project root is in sys.path BEFORE any src imports
# =============================================================================
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Now safe to import from src
from dotenv import load_dotenv

from src.converter.handler import local_test
from src.storage.s3_store import S3ObjectStore
from simulation.aws_mock import MockAWSClients

SOURCE_BUCKET = "cef-audit-logs"
DESTINATION_BUCKET = "json-audit-logs"

SAMPLE_LINES = [
    'Feb 14 14:53:01 api.pulumi.com CEF:0|Pulumi|Pulumi Service|1.0|User Login|'
    'User "tushar-pulumi-corp" logged into the Pulumi Console.|0|authenticationFailure=false '
    'dvchost=api.pulumi.com orgID=bbdf1c46-4a7b-497c-8b3d-0acf8a55e505 requireOrgAdmin=false '
    'requireStackAdmin=false rt=1676386381000 src=99.159.29.103 suser=tushar-pulumi-corp '
    'tokenID= tokenName= userID=b557a719-8291-4cd3-93e4-fa5405c0ce49',
    'Feb 14 14:51:47 api.pulumi.com CEF:0|Pulumi|Pulumi Service|1.0|User Login|'
    'User "shaht" logged into the Pulumi Console.|0|authenticationFailure=false '
    'dvchost=api.pulumi.com orgID=bbdf1c46-4a7b-497c-8b3d-0acf8a55e505 requireOrgAdmin=false '
    'requireStackAdmin=false rt=1676386307000 src=99.159.29.103 suser=shaht '
    'tokenID= tokenName= userID=fb4716e8-dd2b-4133-93d7-f2d0edd3b8fb',
]


def build_s3_record(bucket: str, key: str, size: int = 0,
                    event_name: str = "ObjectCreated:Put") -> Dict[str, Any]:
    """Build one S3 notification record as Lambda receives it."""
    return {
        "eventVersion": "2.1",
        "eventSource": "aws:s3",
        "awsRegion": os.getenv("AWS_REGION", "us-east-1"),
        "eventTime": datetime.utcnow().strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
        "eventName": event_name,
        "s3": {
            "s3SchemaVersion": "1.0",
            "bucket": {"name": bucket, "arn": f"arn:aws:s3:::{bucket}"},
            "object": {"key": quote_plus(key, safe="/"), "size": size},
        },
    }


def build_s3_event(bucket: str, keys: List[str]) -> Dict[str, Any]:
    return {"Records": [build_s3_record(bucket, key) for key in keys]}


class EventSimulator:
    """Replays CEF audit log files through the converter against mock S3."""

    def __init__(self, source_bucket: str = SOURCE_BUCKET,
                 destination_bucket: str = DESTINATION_BUCKET, verbose: bool = False):
        self.source_bucket = source_bucket
        self.destination_bucket = destination_bucket
        self.aws_client = MockAWSClients(verbose=verbose)
        self.store = S3ObjectStore(self.aws_client.get_s3_client())

    def upload(self, key: str, content: bytes):
        self.aws_client.put(self.source_bucket, key, content)

    def load_directory(self, logs_dir: str, suffix: str = ".ceff") -> List[str]:
        """Upload every matching file in a directory; returns the object keys."""
        keys = []
        for path in sorted(Path(logs_dir).glob(f"*{suffix}")):
            self.upload(path.name, path.read_bytes())
            keys.append(path.name)
        return keys

    def run(self, keys: List[str], max_workers: int = 1) -> Dict[str, Any]:
        """Send one notification batch for the keys and return the parsed response body."""
        event = build_s3_event(self.source_bucket, keys)
        response = local_test(event, self.store, self.destination_bucket, max_workers=max_workers)
        return json.loads(response["body"])

    def output(self, destination_key: str) -> Optional[str]:
        body = self.aws_client.get(self.destination_bucket, destination_key)
        return body.decode("utf-8") if body is not None else None

    def run_simulation(self, logs_dir: Optional[str] = None, replay: bool = True,
                       max_workers: int = 1) -> Dict[str, Any]:
        """Convert a directory of logs (or the built-in sample), optionally replaying the batch."""
        if logs_dir:
            keys = self.load_directory(logs_dir)
            if not keys:
                print(f"❌ No .ceff files found in: {logs_dir}")
                return {}
        else:
            keys = ["2023-02-14_14.ceff"]
            self.upload(keys[0], "\n".join(SAMPLE_LINES).encode("utf-8"))

        print("🚀 Starting CEF conversion simulation")
        print("=" * 50)

        first = self.run(keys, max_workers=max_workers)
        for result in first["results"]:
            print(f" {result['key']} -> {result['destination_key']}: {result['state']} ({result['records']} records)")
            if "error" in result:
                print(f"   {result['error']['code']}: {result['error']['message']}")

        results = {"first_pass": first}
        if replay:
            print("\n🔁 Replaying the same notifications")
            second = self.run(keys, max_workers=max_workers)
            for result in second["results"]:
                print(f" {result['key']}: {result['state']}")
            results["replay"] = second

        print("\n" + "=" * 50)
        print("📊 Simulation Summary")
        print(f" Objects: {len(keys)}")
        print(f" Written: {first['summary']['written']}")
        print(f" Failed: {first['summary']['failed']}")
        print(f" S3 calls: {len(self.aws_client.get_logs())}")
        return results


def main():
    """Main entry point for simulation."""
    import argparse

    load_dotenv()
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING").upper())

    parser = argparse.ArgumentParser(description="CEF to JSON conversion simulator")
    parser.add_argument("--logs-dir", help="Directory containing .ceff audit log files")
    parser.add_argument("--no-replay", action="store_true", help="Skip the duplicate-delivery pass")
    parser.add_argument("--workers", type=int, default=int(os.getenv("MAX_WORKERS", "1")),
                        help="Notifications converted in parallel")
    parser.add_argument("--output-dir", help="Write converted .json documents here")
    parser.add_argument("--verbose", action="store_true", help="Print every mock S3 call")

    args = parser.parse_args()

    simulator = EventSimulator(
        destination_bucket=os.getenv("DEST_BUCKET", DESTINATION_BUCKET),
        verbose=args.verbose,
    )
    results = simulator.run_simulation(args.logs_dir, replay=not args.no_replay, max_workers=args.workers)

    if results and args.output_dir:
        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        for result in results["first_pass"]["results"]:
            content = simulator.output(result["destination_key"]) if result["destination_key"] else None
            if content is not None:
                target = output_dir / Path(result["destination_key"]).name
                target.write_text(content)
                print(f"\n💾 Converted output saved to: {target}")


if __name__ == "__main__":
    main()
