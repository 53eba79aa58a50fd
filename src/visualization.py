import matplotlib.pyplot as plt
import networkx as nx
from automaton import Automaton


def _quote(value) -> str:
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def to_dot_graph(automaton: Automaton) -> str:
    lines = ["digraph {"]
    for state in automaton.states:
        for symbol, dest in automaton.transitions_from(state).items():
            lines.append(f"    {_quote(state)} -> {_quote(dest)} [label={_quote(symbol)}]")
    lines.append('    "" [shape=none]')
    lines.append(f'    "" -> {_quote(automaton.start_state)}')
    for state in automaton.accept_states:
        lines.append(f"    {_quote(state)} [peripheries=2]")
    lines.append("}")
    return "\n".join(lines)


class AutomatonVisualizer:
    def __init__(self, automaton: Automaton):
        self.automaton = automaton

    def to_graph(self) -> nx.DiGraph:
        G = nx.DiGraph()
        for state in self.automaton.states:
            G.add_node(state, label=str(state))

        for t in self.automaton.transitions:
            symbol = str(t.symbol)
            if G.has_edge(t.state_in, t.state_out):
                existing_label = G.edges[t.state_in, t.state_out]["label"]
                if symbol not in existing_label.split(","):
                    G.edges[t.state_in, t.state_out]["label"] = f"{existing_label},{symbol}"
            else:
                G.add_edge(t.state_in, t.state_out, label=symbol)
        return G

    def node_color(self, state) -> str:
        if self.automaton.is_start_state(state):
            if self.automaton.is_accept_state(state):
                return "lightgreen"
            return "lightblue"
        if self.automaton.is_accept_state(state):
            return "lightcoral"
        return "lightgray"

    def plot(self, ax, title="Automaton"):
        G = self.to_graph()

        if len(G.nodes) <= 6:
            pos = nx.spring_layout(G, k=2.5, iterations=100, seed=42)
        else:
            pos = nx.spring_layout(G, k=1.5, iterations=50, seed=42)

        node_size = min(2000, max(800, 15000 // max(len(G.nodes), 1)))
        nx.draw_networkx_nodes(
            G,
            pos,
            node_color=[self.node_color(n) for n in G.nodes()],
            node_size=node_size,
            ax=ax,
            alpha=0.9,
        )

        for node, (x, y) in pos.items():
            ax.text(
                x,
                y,
                G.nodes[node]["label"],
                ha="center",
                va="center",
                fontsize=8,
                fontweight="bold",
                bbox=dict(
                    boxstyle="round,pad=0.3",
                    facecolor="white",
                    edgecolor="black",
                    alpha=0.9,
                ),
            )

        nx.draw_networkx_edges(
            G,
            pos,
            edge_color="gray",
            arrows=True,
            arrowsize=15,
            arrowstyle="->",
            width=1.2,
            ax=ax,
            alpha=0.7,
        )

        self._draw_edge_labels(ax, pos, G)
        ax.set_title(title, fontsize=12, fontweight="bold")
        ax.axis("off")

    def _draw_edge_labels(self, ax, pos, G):
        for from_node, to_node, label in G.edges(data="label"):
            x1, y1 = pos[from_node]
            x2, y2 = pos[to_node]

            if from_node == to_node:
                # self loops sit above the node
                label_x, label_y = x1, y1 + 0.15
            else:
                mid_x, mid_y = (x1 + x2) / 2, (y1 + y2) / 2
                dx, dy = x2 - x1, y2 - y1
                length = (dx**2 + dy**2) ** 0.5
                if length > 0:
                    label_x = mid_x - dy / length * 0.08
                    label_y = mid_y + dx / length * 0.08
                else:
                    label_x, label_y = mid_x, mid_y

            ax.text(
                label_x,
                label_y,
                label,
                ha="center",
                va="center",
                fontsize=7,
                fontweight="bold",
                bbox=dict(
                    boxstyle="round,pad=0.2",
                    facecolor="lightcyan" if "," in label else "lightyellow",
                    alpha=0.9,
                    edgecolor="blue" if "," in label else "orange",
                ),
            )

    def save(self, path: str, title: str = None) -> None:
        fig, ax = plt.subplots(figsize=(8, 6))
        try:
            self.plot(ax, title or self.automaton.name)
            fig.tight_layout()
            fig.savefig(path)
        finally:
            plt.close(fig)
