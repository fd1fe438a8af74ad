import json
import sys

import requests

from config import SERVICE_URL

MIRROR_URL = f"{SERVICE_URL}/mirror"
EXPAND_URL = f"{SERVICE_URL}/expand"

FILE_PATH = sys.argv[1] if len(sys.argv) > 1 else "samples/APIClient.swift"  # adjust path


def main():
    with open(FILE_PATH, "r", encoding="utf-8") as f:
        code = f.read()

    payload = {"code": code, "filename": FILE_PATH.replace("\\", "/").split("/")[-1], "conformance": True}

    # 1) Mirror attributed declarations
    resp = requests.post(MIRROR_URL, json=payload)
    resp.raise_for_status()
    data = resp.json()

    for decl in data["declarations"]:
        print(f"=== {decl['name']} ({decl['kind']}) ===")
        for d in decl["diagnostics"]:
            print(f"[ERROR] {d['line']}:{d['column']} {d['message']}")
        if decl["protocol"]:
            print(decl["protocol"])
            print(decl["conformance"])
        elif not decl["diagnostics"]:
            print("[SKIP] no eligible members, no protocol generated")
        print("nodes:", len(decl["graph"]["nodes"]), "edges:", len(decl["graph"]["edges"]))

    # 2) Expanded source
    resp = requests.post(EXPAND_URL, json=payload)
    resp.raise_for_status()
    print("\n=== Expanded source ===")
    print(resp.json()["expanded"])
    print(json.dumps(resp.json()["diagnostics"], indent=2))


if __name__ == "__main__":
    main()
