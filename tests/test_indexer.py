"""Tests for C# invocation extraction."""

from api_trace.caller_graph import CallerGraph
from api_trace.config import NO_PARAMETER
from api_trace.indexer import CSharpIndexer
from api_trace.models.ast_models import MethodIdentity


PAGE = """
using System;

namespace Portal
{
    public partial class Default : System.Web.UI.Page
    {
        private readonly ApiClient client = new ApiClient();

        protected void Submit_Click(object sender, EventArgs e)
        {
            Helper();
            this.Log("clicked");
        }

        private void Helper()
        {
            client.GET_JWT("https://api/x");
        }

        private void Delete(int id)
        {
            var url = "https://api/users/" + id;
            client.DELETE_JWT(url);
            client.POST_JWT();
        }
    }
}
"""


class TestEdges:
    def test_member_access_call_registers_edge(self, indexer):
        indexer.index_source(PAGE, "Default.aspx.cs")
        assert indexer.graph.callers_of("Log") == {MethodIdentity("Submit_Click", "Default.aspx.cs")}

    def test_bare_call_registers_edge(self, indexer):
        indexer.index_source(PAGE, "Default.aspx.cs")
        assert indexer.graph.callers_of("Helper") == {MethodIdentity("Submit_Click", "Default.aspx.cs")}

    def test_api_call_registers_edge(self, indexer):
        indexer.index_source(PAGE, "Default.aspx.cs")
        assert MethodIdentity("Helper", "Default.aspx.cs") in indexer.graph.callers_of("GET_JWT")

    def test_calls_outside_methods_are_skipped(self, indexer):
        source = """
        class Settings
        {
            private static readonly string Url = Config.Read("url");
            public string Token { get { return client.GET_JWT("token"); } }
            public Settings() { client.POST_JWT("ctor"); }
        }
        """
        records = indexer.index_source(source, "Settings.cs")
        assert records == []
        assert indexer.graph.callers_of("Read") == frozenset()
        assert indexer.graph.callers_of("GET_JWT") == frozenset()

    def test_overloads_collapse_to_one_caller(self, indexer):
        source = """
        class Users
        {
            public void Load() { repo.Fetch(); }
            public void Load(int id) { repo.Fetch(); }
        }
        """
        indexer.index_source(source, "Users.cs")
        assert indexer.graph.callers_of("Fetch") == {MethodIdentity("Load", "Users.cs")}

    def test_call_inside_lambda_belongs_to_method(self, indexer):
        source = """
        class Users
        {
            public void Load()
            {
                items.ForEach(x => client.PUT_JWT("https://api/items"));
            }
        }
        """
        records = indexer.index_source(source, "Users.cs")
        assert [r.immediate_method for r in records] == [MethodIdentity("Load", "Users.cs")]

    def test_shared_graph_across_files(self):
        graph = CallerGraph()
        indexer = CSharpIndexer(graph)
        indexer.index_source("class A { void Run() { svc.Load(); } }", "A.cs")
        indexer.index_source("class B { void Go() { svc.Load(); } }", "B.cs")
        assert graph.callers_of("Load") == {MethodIdentity("Run", "A.cs"), MethodIdentity("Go", "B.cs")}


class TestApiRecords:
    def test_records_in_source_order(self, indexer):
        records = indexer.index_source(PAGE, "Default.aspx.cs")
        assert [r.api_method for r in records] == ["GET_JWT", "DELETE_JWT", "POST_JWT"]
        assert records == sorted(records, key=lambda r: r.sort_key)

    def test_record_fields(self, indexer):
        record = indexer.index_source(PAGE, "Default.aspx.cs")[0]
        assert record.api_file == "Default.aspx.cs"
        assert record.api_method == "GET_JWT"
        assert record.endpoint == "https://api/x"
        assert record.immediate_method == MethodIdentity("Helper", "Default.aspx.cs")
        assert record.top_level_method is None
        assert record.ui_binding is None

    def test_missing_argument_uses_sentinel(self, indexer):
        records = indexer.index_source(PAGE, "Default.aspx.cs")
        assert records[2].endpoint == NO_PARAMETER

    def test_non_literal_initializer_is_source_text(self, indexer):
        records = indexer.index_source(PAGE, "Default.aspx.cs")
        assert records[1].endpoint == '"https://api/users/" + id'

    def test_file_without_api_calls_yields_nothing(self, indexer):
        source = "class A { void Run() { svc.Load(); Console.WriteLine(1); } }"
        assert indexer.index_source(source, "A.cs") == []

    def test_custom_api_surface(self):
        indexer = CSharpIndexer(CallerGraph(), api_methods=["GetAsync"])
        source = 'class A { void Run() { http.GetAsync("/users"); http.GET_JWT("/x"); } }'
        records = indexer.index_source(source, "A.cs")
        assert [(r.api_method, r.endpoint) for r in records] == [("GetAsync", "/users")]

    def test_null_conditional_call(self, indexer):
        source = 'class P { void Go() { api?.GET_JWT("u"); } }'
        records = indexer.index_source(source, "P.cs")
        assert [(r.api_method, r.endpoint) for r in records] == [("GET_JWT", "u")]
        assert indexer.graph.callers_of("GET_JWT") == {MethodIdentity("Go", "P.cs")}

    def test_null_conditional_member_chain(self, indexer):
        source = 'class P { void Go() { session?.Client.POST_JWT("v"); } }'
        records = indexer.index_source(source, "P.cs")
        assert [(r.api_method, r.endpoint) for r in records] == [("POST_JWT", "v")]



class TestParser:
    def test_parse_returns_compilation_unit(self, indexer):
        tree = indexer.parse("class A { void Run() { } }")
        assert tree.root_node.type == "compilation_unit"

    def test_parser_per_thread(self, indexer):
        import threading

        parsers = []
        thread = threading.Thread(target=lambda: parsers.append(indexer.parser))
        thread.start()
        thread.join()
        assert parsers[0] is not indexer.parser
