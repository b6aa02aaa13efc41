#!/usr/bin/env python3
"""
CLI for lowering editor flow graphs into rule chains
"""

import argparse
import json
import os
import sys
import logging
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv

# 프로젝트 경로 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from core.runtime.chain_info import ChainInfo, load_and_convert
from core.dependencies import get_rule_metadata
from core.errors import FlowConversionError
from loaders.graph_loader import load_rule_chains

load_dotenv()


def setup_logging(verbose: bool = False):
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    # redis 클라이언트 디버그 로그 비활성화
    logging.getLogger('redis').setLevel(logging.WARNING)
    logging.getLogger('matplotlib').setLevel(logging.WARNING)


def print_chain_summary(info: ChainInfo):
    """Print the converted chain and its validation findings"""
    chain = info.chain
    stats = info.graph_info.get("graph_stats", {})
    print(f"\n 체인 정보:")
    print(f"   Chain ID: {chain.id}")
    print(f"   Root: {chain.rule_chain.root}")
    print(f"   Nodes: {len(chain.nodes)}")
    print(f"   Connections: {len(chain.connections)}")
    print(f"   Is DAG: {stats.get('is_dag')}")

    for warning in info.report.warnings:
        print(f"   ⚠️  {warning}")
    for error in info.report.errors:
        print(f"   ❌ {error}")


def write_json(payload: Dict[str, Any], output: Optional[str]):
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if output:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(text)
        print(f"Saved to {output}")
    else:
        print(text)


def run_convert(args: argparse.Namespace) -> int:
    logger = logging.getLogger(__name__)
    logger.info(f"Converting graph from: {args.graph}")
    info = load_and_convert(args.graph, args.tenant_id)
    print_chain_summary(info)

    if args.png:
        from graph.graph_builder import RuleChainGraph
        if RuleChainGraph(info.chain).visualize_graph(args.png):
            print(f"Graph image saved to {args.png}")

    if args.validate_only:
        print(f"{'✅' if info.report.ok else '❌'} Validation {'passed' if info.report.ok else 'failed'}")
        return 0 if info.report.ok else 1

    write_json(info.chain.to_dict(), args.output)
    return 0


def run_metadata(args: argparse.Namespace) -> int:
    logger = logging.getLogger(__name__)
    if args.parameter_id is None:
        print("--parameter-id is required with --chains")
        return 1
    chains: List = load_rule_chains(args.chains)
    logger.info(f"Resolving dependencies for {len(chains)} chains")
    metadata = get_rule_metadata(chains, args.parameter_id, args.tenant_id, timeout=args.timeout)
    write_json(metadata.to_dict(), args.output)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function"""
    parser = argparse.ArgumentParser(
        description="에디터 그래프를 룰 체인으로 변환",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert a graph and print the rule chain
  python cli/flowchain.py --graph examples/sample_graph.json --tenant-id t1

  # Validation only, with a rendered image
  python cli/flowchain.py --graph examples/sample_graph.json --tenant-id t1 --validate-only --png chain.png

  # Resolve rule dependencies for already lowered chains
  python cli/flowchain.py --chains chains.json --tenant-id t1 --parameter-id 7
        """
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '--graph',
        help='Path to the editor graph JSON file'
    )
    source.add_argument(
        '--chains',
        help='Path to lowered rule chains JSON (object, list, or {"chains": [...]})'
    )

    parser.add_argument(
        '--tenant-id',
        required=True,
        help='Tenant stamped on the chain and used for moment lookups'
    )

    parser.add_argument(
        '--output', '-o',
        help='Write the JSON result to this file (default: stdout)'
    )

    parser.add_argument(
        '--validate-only',
        action='store_true',
        help='Convert and validate, but do not emit the chain'
    )

    parser.add_argument(
        '--png',
        help='Render the converted chain to this image file (needs matplotlib)'
    )

    parser.add_argument(
        '--parameter-id',
        type=int,
        help='Parameter id the dependency metadata is built for'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        help='Give up on moment resolution after this many seconds'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        if args.chains:
            return run_metadata(args)
        return run_convert(args)
    except FileNotFoundError as e:
        print(f"파일을 찾을 수 없습니다: {e}")
        return 1
    except json.JSONDecodeError as e:
        print(f"JSON 파일 형식 오류: {e}")
        return 1
    except FlowConversionError as e:
        logger.error(f"Conversion failed: {e}")
        print(f"변환 실패: {e}")
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        print(f"예상치 못한 오류가 발생했습니다: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
