from __future__ import annotations

import os
from graph.graph_builder import RuleChainGraph
from core.runtime.chain_info import load_and_convert


def main() -> None:
    print("=" * 60)
    print("Flow → RuleChain 변환 테스트")
    print("=" * 60)

    base_dir = os.path.dirname(os.path.abspath(__file__))
    flow_path = os.path.join(base_dir, 'config', 'sample_flow.json')
    output_png = os.path.join(base_dir, 'rule_chain.png')

    # 변환 + 구조 검증
    info = load_and_convert(flow_path, tenant_id="demo-tenant")

    # 그래프 정보 출력
    graph_info = info.graph_info
    print(f"\n루트 노드: {graph_info['root']}")
    print(f"총 노드 수: {graph_info['graph_stats']['nodes']}")
    print(f"총 엣지 수: {graph_info['graph_stats']['edges']}")
    print(f"DAG 여부: {graph_info['graph_stats']['is_dag']}")
    for rule_type, ids in graph_info['type_groups'].items():
        print(f"   {rule_type}: {ids}")

    # 그래프 시각화
    if RuleChainGraph(info.chain).visualize_graph(output_png):
        print(f"\n✅ 그래프 시각화 저장 완료: {output_png}")
    else:
        print("\n⚠️ 그래프 시각화 스킵 (matplotlib 미설치)")


if __name__ == "__main__":
    main()
