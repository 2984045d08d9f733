import streamlit as st
import requests
import os

# Configuration
BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")
st.set_page_config(page_title="QuizGen", layout="wide")

# Initialize session state
def init_session():
    session_defaults = {
        "questions": None,
        "quiz_submitted": False,
        "quiz_result": None,
    }
    for key, value in session_defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value

def error_detail(response) -> str:
    try:
        return response.json().get("detail", "Unknown error")
    except ValueError:
        return f"{response.status_code} {response.reason}"

init_session()

# UI Components
st.title("✨ AI Quiz Generator")
st.subheader("Upload your document and let AI create quiz questions to test your knowledge")

# Sidebar for key, document and settings
with st.sidebar:
    st.header("Gemini API Key")
    api_key = st.text_input("Enter your Google Gemini API key", type="password", placeholder="AIza...")
    st.caption("Get your free API key from Google AI Studio")

    st.header("Upload Document")
    uploaded_file = st.file_uploader("Choose a PDF, DOCX or TXT file", type=["pdf", "docx", "txt"])

    st.header("Configure Quiz")
    question_count = st.number_input("Number of questions", min_value=1, max_value=50, value=10)
    difficulty = st.selectbox("Difficulty", ["easy", "medium", "hard"], index=1)
    question_type = st.selectbox("Question type", ["mcq"], format_func=lambda t: t.upper())

    ready = uploaded_file is not None and api_key.strip()
    if st.button("Generate Quiz", disabled=not ready):
        with st.spinner("Extracting text and generating questions..."):
            try:
                response = requests.post(
                    f"{BACKEND_URL}/quiz-from-file/",
                    files={"file": (uploaded_file.name, uploaded_file.getvalue(), uploaded_file.type)},
                    data={
                        "question_count": int(question_count),
                        "difficulty": difficulty,
                        "question_type": question_type,
                        "api_key": api_key,
                    },
                    timeout=180,
                )
                if response.status_code == 200:
                    st.session_state.questions = response.json()["questions"]
                    st.session_state.quiz_submitted = False
                    st.session_state.quiz_result = None
                    st.success(f"{len(st.session_state.questions)} questions ready to start")
                else:
                    st.error(f"Generation failed: {error_detail(response)}")
            except requests.RequestException as e:
                st.error(f"Connection error: {str(e)}")

# Quiz
if st.session_state.questions:
    questions = st.session_state.questions

    with st.form(key="quiz_form"):
        st.subheader("Quiz Questions")
        answers = []
        for number, q in enumerate(questions, start=1):
            st.markdown(f"**Q{number}:** {q['question']}")
            selected = st.radio(
                f"Select answer for Q{number}:",
                options=list(range(len(q["options"]))),
                format_func=lambda i, opts=q["options"]: f"{'ABCD'[i]}. {opts[i]}",
                key=f"radio_{number}",
                index=None,
                label_visibility="collapsed",
            )
            with st.expander("💡 Hint"):
                st.write(q["hint"])
            answers.append(selected)

        if st.form_submit_button("Submit Quiz"):
            try:
                response = requests.post(
                    f"{BACKEND_URL}/evaluate-quiz/",
                    json={"questions": questions, "answers": answers},
                    timeout=60,
                )
                if response.status_code == 200:
                    st.session_state.quiz_result = response.json()
                    st.session_state.quiz_submitted = True
                else:
                    st.error(f"Evaluation failed: {error_detail(response)}")
            except requests.RequestException as e:
                st.error(f"Connection error: {str(e)}")

    if st.session_state.quiz_submitted and st.session_state.quiz_result:
        result = st.session_state.quiz_result
        st.success(f"## Your Score: {result['score']}")

        with st.expander("Detailed Results"):
            for res in result["detail"]:
                status = "✅" if res["is_correct"] else "❌"
                st.markdown(f"{status} **Question {res['question_number']}:** {res['question']}")
                user_answer = res["user_answer"]
                st.markdown(f"- Your answer: **{'ABCD'[user_answer] if user_answer is not None else '-'}**")
                st.markdown(f"- Correct answer: **{'ABCD'[res['correct_answer']]}**")
                for i, text in enumerate(res["options"]):
                    prefix = "✓ " if i == res["correct_answer"] else "  "
                    st.markdown(f"{prefix}**{'ABCD'[i]}**: {text}")
                st.divider()
else:
    st.info("📄 Add your API key and upload a document to get started")
